# src/main.py

import logging
import sys
from pathlib import Path
from typing import Dict, Any, Optional, List, Sequence
import argparse
import asyncio
import signal
from datetime import date

# Add src to path
sys.path.append(str(Path(__file__).parent))

from config import config
from data.catalog_source import DatabaseCatalogSource, InMemoryCatalogSource, load_reference_catalog
from data.models import Catalog, FloatRecord
from database.database_manager import db_manager
from explorer.comparison import ComparisonSeries, comparison_statistics, compose, profile_summary
from explorer.export import (ExportDispatcher, ExportEstimator, ExportIntent,
                             LoggingExportDispatcher, preview_rows, request_export, validate,
                             validation_errors)
from explorer.filters import apply_filters, available_regions, summarize
from explorer.state import (ExplorerState, SelectParameter, SetDateRange, SetExportFormat, SetRegion,
                            SetSearchText, SetStatus, ToggleExportFloat, ToggleExportParameter,
                            ToggleFloat, reduce)
from nlp.conversation import ConversationSession
from nlp.responders import KeywordResponder, RandomResponder, Responder
from nlp.scheduling import Scheduler
from utils.helpers import ArgoHelpers
from visualization.plot_generator import ExplorerPlotGenerator

logger = logging.getLogger(__name__)

_logging_configured = False


def setup_logging() -> logging.Logger:
    """Setup logging from the logging.* settings (once per process)"""
    global _logging_configured
    if _logging_configured:
        return logging.getLogger(__name__)

    log_level = config.get('logging.level', 'INFO')
    log_format = config.get('logging.format',
                            '%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    log_file = config.get('logging.file')

    formatter = logging.Formatter(log_format)

    handlers: List[logging.Handler] = []
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))
    for handler in handlers:
        root_logger.addHandler(handler)
    _logging_configured = True

    return logging.getLogger(__name__)


class ExplorerSystem:
    """One user session over a catalog: view state, exports and chat"""

    def __init__(self, dispatcher: Optional[ExportDispatcher] = None, state: Optional[ExplorerState] = None):
        self.catalog: Optional[Catalog] = None
        self.state = state or ExplorerState.initial()
        self.estimator = ExportEstimator.from_config()
        self.dispatcher = dispatcher or LoggingExportDispatcher()
        self.plot_generator = ExplorerPlotGenerator()
        self.conversation: Optional[ConversationSession] = None
        self.uses_database = False

    def initialize_system(self, database_url: Optional[str] = None, catalog: Optional[Catalog] = None) -> bool:
        """Load the catalog from the given catalog, a database, or the reference fixture"""
        try:
            if catalog is not None:
                source = InMemoryCatalogSource(catalog)
            elif database_url:
                if not db_manager.initialize_database(database_url, config.get('database.echo', False)):
                    logger.error("Database initialization failed")
                    return False
                db_manager.create_tables()
                source = DatabaseCatalogSource(db_manager)
                self.uses_database = True
            else:
                source = InMemoryCatalogSource(load_reference_catalog())

            self.catalog = source.load_catalog()
            logger.info(f"Explorer initialized with {len(self.catalog)} floats")
            return True

        except Exception as e:
            logger.error(f"System initialization failed: {e}")
            return False

    def _require_catalog(self) -> Catalog:
        if self.catalog is None:
            raise RuntimeError("System not initialized")
        return self.catalog

    def dispatch(self, action) -> ExplorerState:
        self.state = reduce(self.state, action)
        return self.state

    def filtered_floats(self) -> List[FloatRecord]:
        return apply_filters(self._require_catalog(), self.state.criteria)

    def map_view(self) -> Dict[str, Any]:
        floats = self.filtered_floats()
        return {
            'floats': floats,
            'regions': available_regions(self._require_catalog()),
            'summary': summarize(floats),
        }

    def comparison(self) -> ComparisonSeries:
        return compose(self.state.selection, self.state.parameter, self._require_catalog())

    def comparison_view(self) -> Dict[str, Any]:
        series = self.comparison()
        return {
            'series': series,
            'records': series.as_records(),
            'colors': {fid: self.state.selection.color_of(fid) for fid in self.state.selection},
            'statistics': comparison_statistics(series) if len(series.float_ids) > 1 else None,
            'figure': self.plot_generator.create_comparison_plot(series),
        }

    def profile_view(self, float_id: str, parameter: Optional[str] = None) -> Dict[str, Any]:
        parameter = parameter or self.state.parameter
        catalog = self._require_catalog()
        profile = catalog.get_profile(float_id)
        return {
            'float': catalog.get_float(float_id),
            'summary': profile_summary(profile, parameter),
            'figure': self.plot_generator.create_profile_plot(profile, parameter),
        }

    def export_summary(self) -> Dict[str, Any]:
        export_config = self.state.export
        return {
            'format': export_config.format.value,
            'floats': len(export_config.floats),
            'parameters': len(export_config.parameters),
            'days': export_config.date_range.days,
            'estimated_records': self.estimator.estimate_records(export_config),
            'estimated_size_kb': self.estimator.estimate_size_kb(export_config),
            'enabled': validate(export_config),
            'problems': validation_errors(export_config),
            'preview': preview_rows(export_config, self._require_catalog()),
        }

    def request_export(self, requested_on: Optional[date] = None) -> Optional[ExportIntent]:
        return request_export(self.state.export, self.dispatcher, self.estimator, requested_on)

    def open_conversation(self, responder: Optional[Responder] = None,
                          scheduler: Optional[Scheduler] = None) -> ConversationSession:
        """Start a fresh chat, tearing down the previous one"""
        if self.conversation is not None:
            self.conversation.close()
        responder = responder or KeywordResponder(self._require_catalog(), fallback=RandomResponder())
        self.conversation = ConversationSession(responder, scheduler, greeting=config.get('chat.greeting'))
        return self.conversation

    def shutdown(self):
        """Shutdown system gracefully"""
        logger.info("Shutting down FloatChat Explorer...")
        if self.conversation is not None:
            self.conversation.close()
        if self.uses_database:
            db_manager.close_connections()
        logger.info("FloatChat Explorer shutdown complete")


def _print_floats(floats: Sequence[FloatRecord]):
    for record in floats:
        position = ArgoHelpers.format_coordinates(record.lat, record.lon)
        print(f"{record.id}  {record.status.value:<8}  {record.region:<16}  {position}  {record.last_update}")


def _run_floats(system: ExplorerSystem, args) -> int:
    system.dispatch(SetRegion(args.region))
    system.dispatch(SetStatus(args.status))
    system.dispatch(SetSearchText(args.search))
    view = system.map_view()
    _print_floats(view['floats'])
    summary = view['summary']
    print(f"{summary.total} floats, {summary.active} active, {summary.regions} region(s)")
    return 0


def _run_compare(system: ExplorerSystem, args) -> int:
    # Repeating an id would toggle it back off
    for float_id in dict.fromkeys(args.float_ids):
        before = system.state.selection
        system.dispatch(ToggleFloat(float_id))
        if system.state.selection == before:
            print(f"Selection is full, skipping float {float_id}")
    system.dispatch(SelectParameter(args.parameter))

    view = system.comparison_view()
    series = view['series']
    header = ['depth'] + [f'float{slot}' for slot in range(1, len(series.float_ids) + 1)]
    print("\t".join(header))
    for row in series.rows:
        cells = [f"{row.depth:g}"] + [
            "" if row.get(slot) is None else f"{row.get(slot):g}"
            for slot in range(1, len(series.float_ids) + 1)
        ]
        print("\t".join(cells))

    stats = view['statistics']
    if stats is not None and stats.average_difference is not None:
        print(f"Average difference: {stats.average_difference:.2f}")
    return 0


def _run_export(system: ExplorerSystem, args) -> int:
    system.dispatch(SetExportFormat(args.format))
    for float_id in dict.fromkeys(args.float_ids):
        system.dispatch(ToggleExportFloat(float_id))
    for parameter in dict.fromkeys(args.parameters):
        system.dispatch(ToggleExportParameter(parameter))
    start = ArgoHelpers.parse_date(args.date_from)
    end = ArgoHelpers.parse_date(args.date_to)
    if start is None or end is None:
        print("Dates must be given as YYYY-MM-DD")
        return 2
    system.dispatch(SetDateRange(start, end))

    summary = system.export_summary()
    print(f"Estimated records: {summary['estimated_records']}")
    print(f"Estimated size: {summary['estimated_size_kb']} KB")
    intent = system.request_export()
    if intent is None:
        print(f"Export disabled: {', '.join(summary['problems'])}")
        return 1
    print(intent.to_json())
    return 0


async def _chat(system: ExplorerSystem, messages: Sequence[str]):
    session = system.open_conversation()
    with session:
        for text in messages:
            session.send(text)
        await session.wait_until_idle(timeout=session.response_delay_ms / 1000.0 + 5)
        return session.messages


def _run_chat(system: ExplorerSystem, args) -> int:
    for message in asyncio.run(_chat(system, [" ".join(args.message)])):
        stamp = message.timestamp.strftime('%H:%M:%S')
        print(f"[{stamp}] {message.role.value}: {message.content}")
        for attachment in message.attachments:
            print(f"    [{attachment.kind.value}] {attachment.title}: {attachment.description}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='FloatChat ARGO data explorer')
    parser.add_argument('--config', help='Path to configuration file')
    parser.add_argument('--database-url', help='Load the catalog from this database instead of the reference data')
    subparsers = parser.add_subparsers(dest='command', required=True)

    floats = subparsers.add_parser('floats', help='List floats matching the filters')
    floats.add_argument('--region', default='all')
    floats.add_argument('--status', default='all', choices=['all', 'active', 'inactive'])
    floats.add_argument('--search', default='')

    compare = subparsers.add_parser('compare', help='Compare depth profiles of up to five floats')
    compare.add_argument('float_ids', nargs='+')
    compare.add_argument('--parameter', default='temperature')

    export = subparsers.add_parser('export', help='Validate an export and print its intent')
    export.add_argument('float_ids', nargs='+')
    export.add_argument('--parameters', nargs='+', required=True)
    export.add_argument('--format', default='csv', choices=['csv', 'netcdf', 'json'])
    export.add_argument('--from', dest='date_from', default='2024-01-01')
    export.add_argument('--to', dest='date_to', default='2024-01-31')

    chat = subparsers.add_parser('chat', help='Ask the assistant a question')
    chat.add_argument('message', nargs='+')

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point with command-line interface"""
    args = build_parser().parse_args(argv)

    # Load configuration
    if args.config:
        config.load_config(args.config)

    setup_logging()

    # Commands work only from their arguments, so no preselections
    system = ExplorerSystem(state=ExplorerState.initial(seeded=False))
    signal.signal(signal.SIGTERM, lambda signum, frame: system.shutdown())

    if not system.initialize_system(database_url=args.database_url):
        print("System initialization failed. Check logs for details.")
        return 1

    commands = {
        'floats': _run_floats,
        'compare': _run_compare,
        'export': _run_export,
        'chat': _run_chat,
    }

    try:
        return commands[args.command](system, args)
    finally:
        system.shutdown()


if __name__ == "__main__":
    sys.exit(main())
