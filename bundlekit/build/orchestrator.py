"""Build, dll, dev-server and print pipelines over assembled configs."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple

from ..config.assembled import AssembledConfig, entry_target, from_entries
from ..config.assembler import WEB_FAMILY, assemble
from ..config.paths import get_by_path
from ..config.resolver import ResolvedConfig
from ..defaults import DEFAULTS, CliDefaults
from ..errors import BuildFailure
from ..options import BuildOption, resolve_port
from .bundler import Bundler
from .models import BuildReport, BuildResult

logger = logging.getLogger(__name__)

_SERVED_TARGETS = frozenset(target.value for target in WEB_FAMILY)


def build(assembled: AssembledConfig, option: BuildOption, bundler: Bundler) -> BuildReport:
    """Compile every entry in order; one failing target does not stop the rest."""

    if option.watch:
        logger.info("Watch mode enabled; the bundler keeps rebuilding on change.")

    report = BuildReport()
    for entry in assembled.entries:
        target = entry_target(entry)
        try:
            logs = bundler.compile(entry)
        except BuildFailure as exc:
            logger.error("%s", exc)
            report.results.append(BuildResult(target=target, status="failed", error=str(exc)))
            continue
        logger.info("Built %s target", target)
        report.results.append(BuildResult(target=target, status="succeeded", logs=list(logs or [])))

    if not report.ok:
        logger.error("Build failed for: %s", ", ".join(report.failed_targets))
    return report


def dll(
    resolved: ResolvedConfig,
    option: BuildOption,
    bundler: Bundler,
    *,
    defaults: CliDefaults = DEFAULTS,
) -> BuildReport:
    """Build only the shared vendor (dll) bundle."""

    dll_option = replace(option, build_type=None, only_dll=True, only_web=False, only_node=False)
    assembled = assemble(resolved, dll_option, defaults=defaults)
    return build(assembled, dll_option, bundler)


def server(
    assembled: AssembledConfig,
    option: BuildOption,
    bundler: Bundler,
    *,
    defaults: CliDefaults = DEFAULTS,
) -> BuildReport:
    """Build the non-served targets, then serve the rest on the configured port.

    Blocks inside ``bundler.serve`` until the process is terminated or
    interrupted and returns the report of the preliminary build pass.
    """

    port = resolve_port(option, defaults)
    served = [entry for entry in assembled.entries if entry_target(entry) in _SERVED_TARGETS]
    prebuilt = [entry for entry in assembled.entries if entry_target(entry) not in _SERVED_TARGETS]
    if not served:
        served, prebuilt = prebuilt, []

    report = build(from_entries(prebuilt), option, bundler) if prebuilt else BuildReport()
    if not report.ok:
        logger.warning("Starting dev server although %s failed to build.", ", ".join(report.failed_targets))

    dev_entries = [_with_dev_server(entry, port) for entry in served]
    try:
        bundler.serve(from_entries(dev_entries), port)
    except KeyboardInterrupt:
        logger.info("Dev server stopped.")
    return report


def print_config(
    assembled: AssembledConfig,
    node: Optional[str] = None,
    *,
    label: Optional[str] = None,
) -> List[Tuple[str, Any]]:
    """Return ``(label, value)`` pairs to display.

    With ``node`` each entry is looked up by that key path; missing paths
    yield ``None``. Without it the whole payload is returned once.
    """

    if not node:
        return [("config", assembled.as_payload())]
    return [(label or entry_target(entry), get_by_path(entry, node)) for entry in assembled.entries]


def _with_dev_server(entry: Dict[str, Any], port: int) -> Dict[str, Any]:
    dev_server = dict(entry.get("devServer") or {})
    dev_server["port"] = port
    return {**entry, "devServer": dev_server}


__all__ = ["build", "dll", "print_config", "server"]
