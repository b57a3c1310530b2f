from argparse import ArgumentParser
from datetime import timedelta
import importlib
import logging
import os
import re
from string import Template
import time
import traceback
import yaml

import urllib3

urllib3.disable_warnings()


from pathlib import Path

from common.error_manager import ErrorManager, ProcessingContext
from common.grafana_model import GrafanaDashboard
from common.variables import apply_selection
from repeater.repeat_processor import RepeatProcessor
from repeater.repeater import RepeatError
from shared_state.global_shared_state import GLOBAL_SHARED_STATE

REPORT_FILE = "result_report.yml"
ERRORS_FILE = "errors.csv"

logger = logging.getLogger(__name__)


def get_log_level_descriptor(log_level) -> int:
    if log_level:
        return getattr(logging, log_level.upper())
    return logging.INFO


def extend_module_name(module_name: str, module_type: str) -> str:
    return module_type + "." + module_name + "." + module_name + "_" + module_type


def create_class_name(module: str, module_type: str) -> str:
    capitalized_module_name = re.sub(
        r"(^|[_])\s*([a-zA-Z])", lambda p: p.group(0).upper(), module
    )
    return capitalized_module_name.replace("_", "") + module_type.capitalize()


def parse_args(argv=None):
    parser = ArgumentParser(
        description="Materialize repeated panels and rows of Grafana dashboards"
    )
    parser.add_argument("-c", "--config", required=True, help="Config file to use")
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--exporting",
        action="store_true",
        help="Run exporters, default",
        dest="exporting",
        default=True,
    )
    group.add_argument(
        "--no-exporting",
        action="store_false",
        dest="exporting",
        help="Skip exporters, useful for checking the report only",
    )
    return parser.parse_args(argv)


def run(argv=None):
    args = parse_args(argv)
    start_time = time.time()

    run_configs = load_run_configs_from_template(args.config)
    config_count = 0
    cleanup_reports()
    for run_config in run_configs:
        config_count += 1
        log_level = get_log_level_descriptor(run_config.get("log_level"))
        logger.setLevel(level=log_level)

        importers = build_module_list_from_config(
            run_config, "importer", GLOBAL_SHARED_STATE
        )
        exporters = build_module_list_from_config(
            run_config, "exporter", GLOBAL_SHARED_STATE
        )

        dashboards = import_dashboards(importers)

        error_manager = ErrorManager(
            logger=logger,
            processing_context=ProcessingContext(
                grafana_url=GLOBAL_SHARED_STATE.get("grafana_url"),
                grafana_organization_id=GLOBAL_SHARED_STATE.get("grafana_organization_id"),
            ),
        )
        repeater_config = run_config.get("repeater", {})
        report = {}
        invalid_dashboards = []
        if repeater_config.get("enabled", True):
            repeater = RepeatProcessor(
                error_manager=error_manager,
                global_shared_state=GLOBAL_SHARED_STATE,
                log_level=log_level,
            )
            processed = repeat_dashboards(
                repeater,
                dashboards,
                repeater_config,
                report,
                invalid_dashboards,
                error_manager,
            )
        else:
            logger.info("Repeater disabled in the config")
            processed = dashboards
        create_report(report, invalid_dashboards)

        if exporters and args.exporting:
            export_dashboards(processed, exporters)

        logger.info(f"Finished processing - {len(processed)} dashboards")

        if errors := error_manager.errors_csv():
            with Path(ERRORS_FILE).open("a") as outfile:
                outfile.write(errors + "\n")

    logger.info(
        f"Finished processing {config_count} configurations in time:{timedelta(seconds=(time.time() - start_time))} ---"
    )


def cleanup_reports():
    Path(REPORT_FILE).write_text("")
    Path(ERRORS_FILE).write_text("")


def load_run_configs_from_template(config: str):
    with open(config, "r") as stream:
        config_template = Template(stream.read())
        config_string = config_template.safe_substitute(**os.environ)
        return [c for c in yaml.safe_load_all(config_string) if c]


def build_module_list_from_config(config, module_type, global_shared_state) -> list:
    modules = []
    for module, params in (config.get(module_type) or {}).items():
        module_class = getattr(
            importlib.import_module(name=extend_module_name(module, module_type)),
            create_class_name(module, module_type),
        )
        modules.append(
            module_class(
                params or {},
                global_shared_state,
                get_log_level_descriptor(config.get("log_level")),
            )
        )
    return modules


def import_dashboards(importers) -> list:
    dashboards = []
    for importer in importers:
        logger.info(f"Starting to fetch dashboards from importer: {importer}")
        dashboards.extend(importer.fetch_dashboards())
    return dashboards


def export_dashboards(dashboards, exporters):
    for exporter in exporters:
        logger.info(f"Exporting dashboards with exporter: {exporter}")
        exporter.export_dashboards(dashboards)


def apply_variable_overrides(dashboard: dict, overrides: dict, error_manager):
    templating = dashboard.get("templating", {}).get("list", [])
    for name, values in (overrides or {}).items():
        if isinstance(values, (str, int)):
            values = [values]
        try:
            apply_selection(templating, name, values)
        except KeyError:
            error_manager.add_error(
                f"Variable {name} not defined, selection override ignored",
                error_level="DEBUG",
            )


def repeat_dashboards(
    repeater,
    dashboards,
    repeater_config,
    report,
    invalid_dashboards,
    error_manager: ErrorManager,
) -> list:
    logger.info("Starting repeat processing")
    clean_up = repeater_config.get("mode", "expand") == "clean"
    processed = []
    for envelope in dashboards:
        dashboard = envelope["dashboard"]
        error_manager.context.dashboard = GrafanaDashboard.from_envelope(envelope)
        error_manager.context.panel = None
        try:
            if clean_up:
                summary = repeater.clean_up_repeats(dashboard)
            else:
                apply_variable_overrides(
                    dashboard, repeater_config.get("variables"), error_manager
                )
                summary = repeater.process_repeats(dashboard)
            processed.append(envelope)
            report[dashboard.get("title", dashboard.get("uid"))] = summary
        except RepeatError as e:
            error_manager.add_error(
                f"Error processing repeats, skipping - error:{e}", error_level="ERROR"
            )
            invalid_dashboards.append(dashboard.get("title"))
        except Exception as e:
            logger.error(
                f"Unhandled error on dashboard processing: {e}\nError Context: {error_manager.context}\nTraceback:{traceback.format_exc()}"
            )
            exit(1)
    return processed


def create_report(report, invalid_dashboards):
    logger.info("Building result report")
    enhanced_report = {
        f"Dashboard name: {dashboard}": summary for dashboard, summary in report.items()
    }
    enhanced_report["invalid dashboards"] = invalid_dashboards
    with open(REPORT_FILE, "a") as outfile:
        yaml.dump(enhanced_report, outfile, default_flow_style=False)
        outfile.write("---\n")
    logger.info(f"Finished building result report: {REPORT_FILE}")


if __name__ == "__main__":
    run()
