"""
Server Package

FastAPI application exposing the configuration lookup over HTTP.
"""

from tenantconf.server.main import create_app, run_server

__all__ = ["create_app", "run_server"]
