from __future__ import annotations

import logging

from .convert import convert
from .errors import IndexWarning, TransferWarning
from .filtering import filter_rows, locate_column, write_filtered
from .models import ConfigModel, InputSpec, PipelineResult
from .paths import scratch_file, validate_input
from .scan import classify_output_path, scan_kind, trigger_scan
from .transfer import copy_to_remote
from .version import __version__

BANNER = "=" * 42


def run_pipeline(spec: InputSpec, config: ConfigModel, logger: logging.Logger) -> PipelineResult:
    """Convert, filter and publish one workbook.

    Fatal errors propagate as XlsxToCsvError subclasses. Upload and scan
    failures are logged and reported in the result only.
    """
    validate_input(spec)
    output_path = spec.output_path
    delimiter = config.converter.delimiter

    logger.info(BANNER)
    logger.info("Processing: %s (xlsxtocsv v%s)", spec.source_path.name, __version__)
    logger.info(BANNER)

    with scratch_file(suffix=".raw.csv") as raw_path:
        raw = convert(spec.source_path, raw_path, config.converter, logger)

        logger.info("Looking for column %s...", config.state_column)
        column_index = locate_column(raw.header, config.state_column, delimiter)
        logger.info("Column %s found at position %d", config.state_column, column_index)

        logger.info("Filtering rows with %s=%s...", config.state_column, config.accepted_state)
        table = filter_rows(raw, column_index, config.accepted_state, delimiter)

    logger.info("Total rows: %d", table.total)
    logger.info("Kept rows: %d", table.retained)
    write_filtered(table, output_path)
    logger.info("CSV written: %s", output_path)

    result = PipelineResult(output_path=output_path, total=table.total, retained=table.retained)

    if spec.remote_destination:
        try:
            copy_to_remote(output_path, spec.remote_destination, logger, scp=config.scp)
            result.transferred = True
        except TransferWarning as e:
            logger.warning("SCP upload failed (not blocking): %s", e)
            result.transferred = False
    else:
        logger.info("No SCP upload requested")

    logger.info("Nextcloud scan...")
    target = classify_output_path(str(output_path.absolute()))
    result.scan = scan_kind(target)
    try:
        result.scanned = trigger_scan(target, config, logger)
    except IndexWarning as e:
        logger.warning("Nextcloud scan failed: %s", e)

    logger.info(BANNER)
    logger.info("Processing finished successfully")
    logger.info(BANNER)
    return result
