#!/usr/bin/env python3

import argparse
import logging
import sys

from .config import Settings
from .errors import MigrationError
from .processor import MigrationProcessor


def set_logging_config(tags, log_level_str=None):
    """Configure logging to output only to stderr."""
    handlers = [logging.StreamHandler(sys.stderr)]

    log_levels = {
        'critical': logging.CRITICAL,
        'error': logging.ERROR,
        'warning': logging.WARNING,
        'info': logging.INFO,
        'debug': logging.DEBUG,
    }

    log_level = log_levels.get(log_level_str)
    if log_level is None:
        logging.warning(f'Unknown log level {log_level_str}, setting info')
        log_level = logging.INFO

    logging.basicConfig(
        level=log_level,
        format=f'[{tags} %(asctime)s %(levelname)8s] %(message)s',
        handlers=handlers,
    )


def run_check(args, settings: Settings):
    set_logging_config('check', log_level_str=settings.log_level)

    processor = MigrationProcessor()
    processor.configure(args.raw_config)
    processor.open()

    for collection_name, field_converters in sorted(processor.collections.items()):
        for field_converter in field_converters:
            field_type = processor.schema.field(collection_name, field_converter.field_name)
            logging.info(
                f'{collection_name}.{field_converter.field_name}: '
                f'{field_type} => {field_converter.converter.kind}'
            )
    processor.teardown()
    logging.info('configuration matches target catalog')


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "mode", help="run mode",
        type=str, choices=["check"])
    parser.add_argument("--config", help="config file path", default='config.yaml', type=str)
    args = parser.parse_args()

    settings = Settings()
    try:
        settings.load(args.config)
    except MigrationError as e:
        print(f'invalid config {args.config}: {e}', file=sys.stderr)
        sys.exit(1)

    args.raw_config = settings.raw_data

    try:
        if args.mode == 'check':
            run_check(args, settings)
    except MigrationError as e:
        logging.error(f'check failed: {e}')
        sys.exit(1)


if __name__ == '__main__':
    main()
