"""One recompute pass: read document -> extract -> render -> place -> write."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from bs4 import Tag

from .config import Config
from .document import HostDocument
from .extractor import extract
from .models import Aggregate
from .projector import place, render

log = logging.getLogger(__name__)


@dataclass
class CycleResult:
    aggregate: Aggregate
    panel: Tag
    anchor: Tag | None = None
    written: bool = False
    # The document changed under us; the pass should be repeated
    stale: bool = False

    @property
    def placed(self) -> bool:
        return self.anchor is not None


def run_cycle(
    config: Config,
    panel: Tag | None = None,
    *,
    dry_run: bool = False,
) -> CycleResult | None:
    """Run a single recompute pass.

    Returns None when the host view is not there yet (no root element).
    *panel* is the panel from a previous pass; it is reused when the document
    does not already carry one.
    """
    schema = config.schema
    document = HostDocument.load(config.document_path, schema)
    if document is None:
        return None

    root = document.root()
    if root is None:
        log.debug("Host root %s not present, skipping", schema.root_selector)
        return None

    aggregate = extract(root, schema)
    existing = document.panel()
    if existing is not None:
        panel = existing
    panel = render(aggregate, document.soup, schema, panel)

    anchor = document.anchor()
    if anchor is None:
        log.debug("Placement anchor %s not present, panel not inserted", schema.anchor_selector)
        return CycleResult(aggregate=aggregate, panel=panel)

    moved = place(panel, anchor, schema.anchor_position)
    result = CycleResult(aggregate=aggregate, panel=panel, anchor=anchor)

    if dry_run:
        log.info("[DRY RUN] Would write time division for %d facilitator(s) to %s",
                 len(aggregate), config.target_path)
        return result

    if document.save(config.target_path, if_unchanged=True):
        result.written = True
        log.info("Time division updated: %d facilitator(s)%s",
                 len(aggregate), "" if moved else " (panel already in place)")
    else:
        result.stale = True
    return result
