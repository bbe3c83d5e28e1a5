#!/usr/bin/env python3
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from pathlib import Path

import click
import yaml
from pydantic import ValidationError
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from countable_filter.configuration import config
from countable_filter.declarative import FilterDefinition, build_filter_class
from countable_filter.exceptions import FilterError

logger = logging.getLogger(__name__)

EXIT_CODE_NOK: int = 1
EXIT_CODE_OK: int = 0


def setup_logging(quiet: bool) -> None:
    file_handler = logging.FileHandler(config.log_filepath)
    stream_handler = logging.StreamHandler(sys.stderr)
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    file_handler.setFormatter(formatter)
    stream_handler.setFormatter(formatter)
    handlers: list[logging.Handler] = [file_handler] if quiet else [file_handler, stream_handler]
    logging.basicConfig(level=logging.INFO, handlers=handlers)


def _jsonable(value):
    if isinstance(value, dict):
        return [{"value": k, "count": v} for k, v in value.items()]
    return value


@click.command()
@click.argument(
    "definitionpath",
    required=True,
    type=click.Path(exists=True, file_okay=True, dir_okay=False, readable=True),
)
@click.option(
    "-d",
    "--data",
    "data",
    default="{}",
    help="Filter values as a JSON object, e.g. '{\"brand\": [\"acme\"]}'.",
)
@click.option(
    "-n",
    "--countable",
    "countables",
    multiple=True,
    help="Limit the counts to this countable. May be given multiple times.",
)
@click.option("--mongo-uri", default=None, help="MongoDB connection string, overrides the configuration.")
@click.option("--database", default=None, help="MongoDB database, overrides the configuration.")
@click.option(
    "-c",
    "--config",
    "configpath",
    default=None,
    type=click.Path(file_okay=True, dir_okay=False, readable=True),
    help="Path to your own config yaml file that will override the default config.",
)
@click.option("-q", "--quiet", is_flag=True, help="If set, will not log to stderr")
def main(
    definitionpath: Path,
    data: str,
    countables: tuple[str, ...],
    mongo_uri: str | None,
    database: str | None,
    configpath: Path | None,
    quiet: bool,
):
    """Prints the alternative counts of the filter described by DEFINITIONPATH as JSON."""
    if configpath:
        try:
            config.load_from_yaml(configpath)
        except FileNotFoundError:
            click.echo("Error: Bad path to configuration file", err=True)
            sys.exit(EXIT_CODE_NOK)
        except (ValueError, ValidationError, yaml.YAMLError) as e:
            click.echo(f"Error: Bad format of configuration file: {e}", err=True)
            sys.exit(EXIT_CODE_NOK)

    setup_logging(quiet)

    try:
        definition = FilterDefinition.from_yaml(definitionpath)
    except (ValueError, ValidationError, yaml.YAMLError) as e:
        click.echo(f"Error: Bad format of filter definition: {e}", err=True)
        sys.exit(EXIT_CODE_NOK)

    try:
        filter_data = json.loads(data)
    except json.JSONDecodeError as e:
        click.echo(f"Error: Filter data is not valid JSON: {e}", err=True)
        sys.exit(EXIT_CODE_NOK)

    if not isinstance(filter_data, dict):
        click.echo("Error: Filter data must be a JSON object", err=True)
        sys.exit(EXIT_CODE_NOK)

    try:
        client: MongoClient = MongoClient(mongo_uri or config.mongo_uri)
    except PyMongoError as e:
        click.echo(f"Error: Bad MongoDB connection string: {e}", err=True)
        sys.exit(EXIT_CODE_NOK)

    try:
        db_name = database or config.mongo_database
        db = client[db_name] if db_name else client.get_default_database()
        filter_class = build_filter_class(definition)
        start = datetime.now()

        counts = filter_class(filter_data, collection=db[definition.collection]).get_counts(list(countables))

        end = datetime.now()
        logger.info(f"Counting {len(counts)} countables took {(end-start)} seconds.")
    except FilterError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CODE_NOK)
    except PyMongoError as e:
        click.echo(f"Error: Database error: {e}", err=True)
        sys.exit(EXIT_CODE_NOK)
    finally:
        client.close()

    click.echo(json.dumps(counts.map(lambda value, _: _jsonable(value)).to_dict(), indent=2, default=str))
    sys.exit(EXIT_CODE_OK)


if __name__ == "__main__":
    main()
