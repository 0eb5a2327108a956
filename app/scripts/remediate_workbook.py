# scripts/remediate_workbook.py
from dotenv import load_dotenv
load_dotenv()

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from core.errors import AutotierError
from core.logger import logger
from integrations.blob_store import AzureBlobStore
from services.output_publisher import derive_output_name
from services.remediation_pipeline import RemediationPipeline


def remediate_local_workbook(input_path: Path, output_path: Optional[Path] = None, pipeline: Optional[RemediationPipeline] = None) -> Path:
    """
    Run the remediation pass on a local workbook and write the annotated copy.

    Blob tiers are read and changed against the live store with the
    configured Azure credential; only the workbook itself stays local.
    """
    pipeline = pipeline or RemediationPipeline(AzureBlobStore())
    annotated, result = pipeline.process_workbook(input_path.read_bytes())

    output_path = output_path or input_path.with_name(derive_output_name(input_path.name))
    output_path.write_bytes(annotated)

    stats = result.stats
    print("\n===== Summary =====")
    print(f"Total blobs found in Excel: {stats.processed}")
    print(f"Blobs changed to Cool: {stats.changed}")
    print(f"Blobs skipped (not Archive or missing tier): {stats.skipped}")
    print(f"Errors: {stats.errors}")
    print(f"Annotated workbook: {output_path}")
    return output_path


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Demote archived blobs referenced from a local .xlsx workbook to Cool."
    )
    parser.add_argument("input", type=Path, help="Workbook to scan (e.g. input.xlsx)")
    parser.add_argument("-o", "--output", type=Path, default=None,
                        help="Annotated copy (default: <input>_processed.xlsx)")
    args = parser.parse_args(argv)

    if not args.input.is_file():
        parser.error(f"file not found: {args.input}")

    try:
        remediate_local_workbook(args.input, args.output)
    except AutotierError as e:
        logger.error(f"Remediation failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    """
    Usage (from the app/ directory or after `pip install -e .`):

        python -m scripts.remediate_workbook input.xlsx

    Credentials come from the default Azure credential chain
    (e.g. `az login`), or a managed identity when
    AZURE_USE_MANAGED_IDENTITY=true.
    """
    sys.exit(main())
