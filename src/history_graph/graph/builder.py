"""Build the domain co-visitation graph from chronologically ordered history."""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import urlsplit

import structlog

from history_graph.graph.model import Graph, Link, Node
from history_graph.history.records import HistoryRecord

logger = structlog.get_logger()


def get_domain(url: str) -> str:
    """Return the lower-cased host of ``url``, or ``url`` itself if it has none.

    Relative strings, malformed hosts and host-less schemes such as
    ``about:blank`` or ``file:///`` fall back to the raw URL.
    """
    try:
        parts = urlsplit(url)
        host = parts.hostname
    except ValueError as e:
        logger.warning("url_parse_failed", url=url, error=str(e))
        return url

    if not parts.scheme or not host:
        logger.warning("url_parse_failed", url=url, error="no host")
        return url
    return host


def build_graph(records: Iterable[HistoryRecord]) -> Graph:
    """Accumulate nodes and ordered transition links, in record order.

    ``records`` must be sorted ascending by visit time.  Consecutive
    records on different domains add one to the weight of the link keyed
    by ``(previous_domain, domain)``.  Every node's ``cluster`` is unset.
    """
    graph = Graph()
    prev_domain: str | None = None

    for record in records:
        domain = get_domain(record.url)

        node = graph.nodes.get(domain)
        if node is None:
            graph.nodes[domain] = Node(
                id=domain,
                sample_url=record.url,
                visit_count=1,
                last_visit=record.last_visit_time,
            )
        else:
            node.visit_count += 1
            node.last_visit = max(node.last_visit, record.last_visit_time)

        if prev_domain is not None and prev_domain != domain:
            key = (prev_domain, domain)
            link = graph.links.get(key)
            if link is None:
                graph.links[key] = Link(source=prev_domain, target=domain)
            else:
                link.weight += 1

        prev_domain = domain

    logger.debug("graph_built", nodes=len(graph.nodes), links=len(graph.links))
    return graph
