"""Bridge to the ``openapi2postmanv2`` converter (npm package ``openapi-to-postmanv2``).

The conversion itself happens in that tool; this module writes the
specification to a temp directory, runs the converter and reads the
generated collection back.
"""

import json
import shutil
import subprocess
import tempfile
from pathlib import Path

from postman_sync.errors import ConversionError
from postman_sync.models import ConversionOptions

CONVERTER_BIN = "openapi2postmanv2"


def build_command(spec_path: Path, output_path: Path, options: ConversionOptions) -> list[str]:
    folder_strategy = "Paths" if options.folder_strategy == "paths" else "Tags"
    converter_options = {
        "folderStrategy": folder_strategy,
        "includeAuthInfoInExample": str(options.include_auth).lower(),
        "requestParametersResolution": options.parameters_resolution,
        "exampleParametersResolution": options.parameters_resolution,
        "optimizeConversion": str(options.optimize_conversion).lower(),
        "stackLimit": str(options.stack_limit),
    }
    option_arg = ",".join(f"{k}={v}" for k, v in converter_options.items())
    return [CONVERTER_BIN, "-s", str(spec_path), "-o", str(output_path), "-p", "-O", option_arg]


def convert_spec(spec: dict, options: ConversionOptions | None = None) -> dict:
    """Convert an OpenAPI document into a Postman collection."""
    options = options or ConversionOptions()
    if shutil.which(CONVERTER_BIN) is None:
        raise ConversionError(
            f"{CONVERTER_BIN} not found on PATH; install it with `npm install -g openapi-to-postmanv2`"
        )

    with tempfile.TemporaryDirectory() as tmpdir:
        tmppath = Path(tmpdir)
        spec_path = tmppath / "openapi.json"
        output_path = tmppath / "collection.json"
        spec_path.write_text(json.dumps(spec), encoding="utf-8")

        result = subprocess.run(
            build_command(spec_path, output_path, options),
            capture_output=True,
            text=True,
            cwd=tmpdir,
        )
        if result.returncode != 0 or not output_path.exists():
            detail = (result.stderr or result.stdout).strip()[:500]
            raise ConversionError(f"Conversion failed: {detail or 'no output produced'}")

        try:
            collection = json.loads(output_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConversionError(f"Converter produced invalid JSON: {e}") from e

    if not isinstance(collection, dict) or "item" not in collection:
        raise ConversionError("Converter output is not a Postman collection")
    return collection
