"""Dashboard flow: address entry, lookups, navigation, and exports.

Presentation-free controller for the screens the dashboard moves through
(entry → loading → dashboard, and back). It owns no rendering; panels follow
the store through ``dashboard.view_model.DashboardView``.
"""

import logging
from typing import Dict, List, Optional

import config
from collectors.portfolio_collector import PortfolioLoadError, load_portfolio
from dashboard.address import (
    InvalidAddressError, address_from_fragment, fragment_for, is_valid_address,
    normalize_address, parse_address,
)
from dashboard.recent import RecentLookups
from reporting.report_generator import generate_report
from reporting.spreadsheet import ExportUnavailableError, generate_spreadsheet
from storage.models import PortfolioSnapshot
from storage.state import SnapshotStore

logger = logging.getLogger(__name__)

ENTRY = "entry"
LOADING = "loading"
DASHBOARD = "dashboard"


class DashboardSession:
    def __init__(self, client, store: Optional[SnapshotStore] = None,
                 recent: Optional[RecentLookups] = None):
        self.client = client
        self.store = store or SnapshotStore()
        self.recent = recent or RecentLookups()
        self.screen = ENTRY
        self.fragment = ""
        self.address: Optional[str] = None
        self.error: Optional[str] = None  # page-level, e.g. total failure
        self.field_error: Optional[str] = None  # address input
        self.alerts: List[str] = []
        self._alerted = set()

    # ── Input ──

    def validate_input(self, raw: str) -> bool:
        """Whether ``raw`` would be accepted; clears any stale input error."""
        self.field_error = None
        return is_valid_address(normalize_address(raw))

    async def submit(self, raw: str) -> Optional[PortfolioSnapshot]:
        """Look up the typed address.

        Invalid input raises InvalidAddressError before anything is fetched.
        """
        try:
            address = parse_address(raw)
        except InvalidAddressError as e:
            self.field_error = e.message
            raise
        self.field_error = None
        self.recent.add(address)
        self.fragment = fragment_for(address)
        return await self.analyze(address)

    # ── Navigation ──

    async def navigate(self, fragment: str) -> Optional[PortfolioSnapshot]:
        """React to a URL fragment change."""
        self.fragment = fragment
        address = address_from_fragment(fragment)
        if address is None:
            self._show_entry()
            return None
        return await self.analyze(address)

    def back(self):
        """Leave the dashboard; responses still in flight are discarded."""
        self.fragment = ""
        self._show_entry()

    def _show_entry(self):
        self.store.reset()
        self.address = None
        self.screen = ENTRY

    # ── Lookup ──

    async def analyze(self, address: str) -> Optional[PortfolioSnapshot]:
        self.screen = LOADING
        self.error = None
        self.address = address
        generation = self.store.begin(address)

        try:
            snapshot = await load_portfolio(self.client, address, self.store, generation)
        except PortfolioLoadError as e:
            if self.store.fail(generation, str(e)):
                logger.info("Portfolio load failed for %s", address)
                self.error = str(e)
                self.address = None
                self.screen = ENTRY
            return None

        if snapshot is None:
            logger.debug("Lookup for %s superseded", address)
            return None
        self.screen = DASHBOARD
        return snapshot

    # ── Export ──

    def alert_once(self, key: str, message: str) -> bool:
        if key in self._alerted:
            return False
        self._alerted.add(key)
        self.alerts.append(message)
        return True

    def export(self, output_dir: str = config.OUTPUT_DIR,
               report: bool = True, spreadsheet: bool = True) -> Dict[str, str]:
        """Write the requested exports for the current snapshot.

        A missing spreadsheet engine is reported once through ``alerts``;
        the other exports still run.
        """
        snapshot = self.store.current
        if snapshot is None:
            return {}

        paths = {}
        if report:
            paths["report"] = generate_report(snapshot, output_dir)
        if spreadsheet:
            try:
                paths["spreadsheet"] = generate_spreadsheet(snapshot, output_dir)
            except ExportUnavailableError as e:
                self.alert_once("spreadsheet", str(e))
        return paths
