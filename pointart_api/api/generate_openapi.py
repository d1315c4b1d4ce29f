"""
Write the OpenAPI document to interfaces/openapi.json.

    python -m pointart_api.api.generate_openapi [output-path]

WebSocket endpoints are not part of OpenAPI, so they are attached under the
`x-websocket-endpoints` extension.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

from pointart_api.api.main import app
from pointart_api.api.routes.dashboard import WEBSOCKET_ENDPOINTS

DEFAULT_OUTPUT = Path("interfaces") / "openapi.json"


# PUBLIC_INTERFACE
def write_openapi(output: Path = DEFAULT_OUTPUT) -> Path:
    schema = dict(app.openapi())
    schema["x-websocket-endpoints"] = WEBSOCKET_ENDPOINTS
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(schema, indent=2), encoding="utf-8")
    return output


if __name__ == "__main__":
    target = write_openapi(Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_OUTPUT)
    print(f"OpenAPI written to {target}")
