"""Storefront order runner: resolves an order plan against a merchant config and
drives the storefront with Playwright up to (not including) payment."""
