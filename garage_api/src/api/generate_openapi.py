"""
Write the OpenAPI document of the service to ``interfaces/openapi.json``.

Usage:
  python -m src.api.generate_openapi [output_path]
"""
import json
import os
import sys

from src.api.main import app


# PUBLIC_INTERFACE
def write_openapi(output_path: str = os.path.join("interfaces", "openapi.json")) -> str:
    """Render the app's OpenAPI schema (all REST routes are under /api/v1) to ``output_path``."""
    openapi_schema = app.openapi()

    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(openapi_schema, f, indent=2)
    return output_path


if __name__ == "__main__":
    print(write_openapi(*sys.argv[1:2]))
