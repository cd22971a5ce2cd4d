# hwinventory/collectors/main_collector.py
"""
Main Inventory Collector
Orchestrates capability detection and runs every section sub-collector.
Produces a single canonical document per host.
"""

from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Dict, List, Optional, Type
import logging
import threading

from ..config.settings import CollectionConfig
from ..connectors.base_connector import HostConnector
from ..exceptions import CollectionCancelled
from ..models import CanonicalDocument, CollectionWarning, DegradationKind
from .assembler import CanonicalAssembler
from .capability_detector import CapabilityDetector, HostCapabilities
from .sub_collectors import (
    SubCollector,
    SystemSubCollector,
    CpuSubCollector,
    MemorySubCollector,
    DiskSubCollector,
    RaidSubCollector,
    PciSubCollector,
    InterconnectSubCollector
)


class InventoryCollector:
    """
    Runs one inventory of one host.

    Flow:
    1. Probe capabilities once (tools + privilege)
    2. Strict-mode check, before any collector starts
    3. Run all sub-collectors concurrently; none can block or abort another
    4. Assemble the canonical document
    """

    SUB_COLLECTORS: List[Type[SubCollector]] = [
        SystemSubCollector,
        CpuSubCollector,
        MemorySubCollector,
        DiskSubCollector,
        RaidSubCollector,
        PciSubCollector,
        InterconnectSubCollector,
    ]

    def __init__(self, connector: HostConnector, config: CollectionConfig = None,
                 system_name: str = None):
        self.connector = connector
        self.config = config or CollectionConfig()
        self.system_name = system_name or getattr(connector, 'host', None) or 'localhost'
        self.logger = logging.getLogger('collector.InventoryCollector')
        self.assembler = CanonicalAssembler()
        self.capabilities: Optional[HostCapabilities] = None
        self._cancelled = threading.Event()
        self._futures: List[Future] = []

    def probe(self) -> HostCapabilities:
        """Detect tools and privilege; runs once per inventory"""
        detector = CapabilityDetector(
            self.connector,
            required_tools=self.config.required_tools,
            optional_tools=self.config.optional_tools,
            interactive_sudo=self.config.interactive_sudo
        )
        self.capabilities = detector.detect_all()
        if self.config.strict:
            detector.check_strict(self.capabilities)
        return self.capabilities

    def collect(self) -> CanonicalDocument:
        """
        Run the full inventory.

        Raises:
            MissingToolsError: strict mode and required tools are missing
            CollectionCancelled: cancel() was called or the run was interrupted
        """
        self.logger.info(f"Starting inventory of {self.system_name}")
        try:
            capabilities = self.probe()
            self._check_cancelled()

            sections, warnings = self._run_sub_collectors(capabilities)
            self._check_cancelled()
        except KeyboardInterrupt:
            self.cancel()
            raise CollectionCancelled("Inventory interrupted") from None

        document = self.assembler.assemble(sections, capabilities.warnings() + warnings)
        self.logger.info(
            f"Inventory of {self.system_name} completed with {len(document.warnings)} warnings"
        )
        return document

    def cancel(self):
        """Kill in-flight commands and drop pending collectors"""
        if self._cancelled.is_set():
            return
        self.logger.warning("Cancelling inventory")
        self._cancelled.set()
        for future in self._futures:
            future.cancel()
        self.connector.terminate_all()

    def _check_cancelled(self):
        if self._cancelled.is_set():
            raise CollectionCancelled("Inventory cancelled")

    def _run_sub_collectors(self, capabilities: HostCapabilities):
        """
        Run every sub-collector on a bounded pool.

        Returns:
            (section name -> record, warnings in collector order)
        """
        collectors = [
            collector_class(
                self.connector,
                capabilities,
                system_name=self.system_name,
                command_timeout=self.config.command_timeout
            )
            for collector_class in self.SUB_COLLECTORS
        ]

        max_workers = self.config.max_workers or len(collectors)
        executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='collector')
        try:
            self._futures = [executor.submit(collector.collect) for collector in collectors]
            wait(self._futures)
        except KeyboardInterrupt:
            self.cancel()
            raise
        finally:
            # all futures are done unless cancelled; never block on a killed run
            executor.shutdown(wait=False, cancel_futures=True)

        self._check_cancelled()

        sections: Dict[str, Any] = {}
        warnings: List[CollectionWarning] = []
        for collector, future in zip(collectors, self._futures):
            sections[collector.get_section_name()] = self._section_result(collector, future)
            warnings.extend(collector.warnings)

        return sections, warnings

    def _section_result(self, collector: SubCollector, future: Future) -> Any:
        """Collected record, or the all-unknown default when the collector raised"""
        try:
            return future.result()
        except Exception as e:
            collector.log_error(e)
            collector.warn(DegradationKind.PARSE_MISS, collector.get_section_name(),
                           f"collector failed: {e}")
            return collector.default_record()
