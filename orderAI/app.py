# Purpose: FastAPI server in front of the order runner. Turns a plain-English order
# into a plan (/plan), runs a plan against a stored merchant config in a subprocess
# (/execute), and checks a merchant config for required selectors (/merchants/validate).

import json, os, re, subprocess, sys, tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from fastapi import Depends, FastAPI, Header, HTTPException
from pydantic import BaseModel

from orderAI.config import config
from orderAI.exceptions import AuthenticationError, InputFileError, PlanGenerationError, RunnerError
from orderAI.llmPlan import generate_plan, write_plan
from orderAI.logging_config import get_logger, setup_logging
from orderAI.models import load_config
from orderAI.resolver import candidate_items
from orderAI.selectorMap import validate_config
from orderAI.verification import is_pass

setup_logging()
logger = get_logger(__name__)

app = FastAPI(title="Order Runner API")

# Short keys kept for the demo storefronts.
CONFIG_ALIASES = {"a": "asaply-demo", "b": "asaply-demo-b"}
_CONFIG_KEY_RE = re.compile(r"^[a-z0-9][a-z0-9_-]*$")


# Request bodies
class PlanPayload(BaseModel):
    query: str
    config_key: Optional[str] = None


class ExecutePayload(BaseModel):
    plan: Dict[str, Any]
    config_key: str = "a"
    timeout_sec: int = config.RUNNER_TIMEOUT_SEC


# Internal helpers

def check_api_key(key: Optional[str]) -> None:
    if config.API_KEYS and key not in config.API_KEYS:
        raise AuthenticationError("Invalid or missing API key")


def require_api_key(x_api_key: Optional[str] = Header(default=None)) -> None:
    try:
        check_api_key(x_api_key)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e))


# Map a config key ("a", "asaply-demo", ...) to a file under MERCHANT_CONFIG_DIR.
# Returns None for unknown or unsafe keys.
def _config_path(key: str) -> Optional[Path]:
    name = CONFIG_ALIASES.get(key, key)
    if not _CONFIG_KEY_RE.match(name or ""):
        return None
    path = Path(config.MERCHANT_CONFIG_DIR) / f"{name}.json"
    return path if path.exists() else None


# Overlapping requests must never share a plan file; each gets its own,
# next to ORDER_PLAN_PATH.
def _private_plan_file() -> Path:
    plan_dir = Path(config.ORDER_PLAN_PATH).resolve().parent
    plan_dir.mkdir(parents=True, exist_ok=True)
    fd, name = tempfile.mkstemp(prefix="plan-", suffix=".json", dir=plan_dir)
    os.close(fd)
    return Path(name)


# Execute robotOrder as a subprocess.
# Returns:
#     (returncode, stdout, stderr)
# Raises:
#     RunnerError if the subprocess times out.
def _run_order_runner(plan_path: Path, config_path: Path, timeout_sec: int) -> Tuple[int, str, str]:
    cmd = [
        sys.executable, "-m", "orderAI.robotOrder",
        "--plan", str(plan_path),
        "--config", str(config_path),
    ]
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout_sec)
        return proc.returncode, proc.stdout or "", proc.stderr or ""
    except subprocess.TimeoutExpired:
        raise RunnerError(f"Runner timed out after {timeout_sec}s")


# Scan output for a prefixed error line ("Error: ...") from the runner.
# Returns the raw error message (without the 'Error:' prefix) or None.
def _extract_error_line(output: str) -> Optional[str]:
    for line in output.splitlines():
        if line.strip().startswith("Error:"):
            return line.strip()[len("Error:"):].strip()
    return None


# The runner prints a one-line JSON report {"ok": ..., "missingItems": ...}.
# Returns the last such object, or {} if none found.
def _parse_report(stdout: str) -> Dict[str, Any]:
    for line in reversed(stdout.splitlines()):
        line = line.strip()
        if not (line.startswith("{") and line.endswith("}")):
            continue
        try:
            obj = json.loads(line)
        except json.JSONDecodeError:
            continue
        if isinstance(obj, dict) and "ok" in obj:
            return obj
    return {}


# API

@app.post("/plan", dependencies=[Depends(require_api_key)])
def plan(p: PlanPayload):
    menu_names = None
    if p.config_key:
        path = _config_path(p.config_key)
        if path is None:
            raise HTTPException(status_code=400, detail="Unknown config_key")
        try:
            menu_names = candidate_items(load_config(str(path)))
        except InputFileError as e:
            raise HTTPException(status_code=400, detail=str(e))
    try:
        return generate_plan(p.query, menu_names=menu_names)
    except PlanGenerationError as e:
        raise HTTPException(status_code=400, detail=f"Plan generation failed: {e}")


@app.post("/execute", dependencies=[Depends(require_api_key)])
def execute(p: ExecutePayload):
    #1 Resolve the merchant config
    config_path = _config_path(p.config_key)
    if config_path is None:
        raise HTTPException(status_code=400, detail="Unknown config_key")
    #2 Persist the plan to a file owned by this request only
    plan_path = _private_plan_file()
    #3 Run the order in a separate process
    try:
        write_plan(p.plan, str(plan_path))
        returncode, stdout, stderr = _run_order_runner(plan_path, config_path, p.timeout_sec)
    except RunnerError as e:
        raise HTTPException(status_code=504, detail=str(e))
    finally:
        plan_path.unlink(missing_ok=True)
    #4 Unusable plan/config is the caller's fault
    if returncode == 2:
        raise HTTPException(status_code=400, detail=_extract_error_line(stderr) or stderr.strip() or "Invalid input")
    #5 PASS needs a clean exit and the runner's PASS line
    result = {
        "ok": returncode == 0 and is_pass(stdout),
        "exitCode": returncode,
        "logs": stdout,
        "report": _parse_report(stdout),
    }
    error_msg = _extract_error_line(stderr)
    if error_msg:
        result["error"] = error_msg
    logger.info("Execute %s: exit=%s ok=%s", p.config_key, returncode, result["ok"])
    return result


@app.post("/merchants/validate", dependencies=[Depends(require_api_key)])
def merchants_validate(cfg: Dict[str, Any]):
    ok, missing = validate_config(cfg)
    return {"ok": ok, "missing": missing}
