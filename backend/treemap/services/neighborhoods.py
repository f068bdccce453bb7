"""Neighborhood overlay: livability metrics per neighborhood polygon.

The neighborhood document is served as loaded, except that each feature
is tagged with the metric currently shown so the map can pick the
matching color ramp, and with the values of its summary card.
"""

from __future__ import annotations

import copy
from typing import Any, Literal

from treemap.utils import parsing

Metric = Literal["heat", "pm25", "laeq", "la50"]

METRIC_ATTRIBUTES: dict[Metric, str] = {
    "heat": "heat_class_mean",
    "pm25": "pm25_ugm3",
    "laeq": "laeq_db",
    "la50": "la50_db",
}

# Neighborhoods with fewer trees than this show "no data" for the count.
MIN_REPORTED_TREES = 50


def summarize(properties: dict[str, Any]) -> dict[str, Any]:
    """Values shown on a neighborhood's card.

    Args:
        properties: Attributes of one neighborhood feature.

    Returns:
        Dictionary with the name, the alive tree count (None when missing
        or below MIN_REPORTED_TREES, with ``tree_count_suppressed`` telling
        the two apart) and each metric value.
    """
    tree_count = parsing.parse_int(properties.get("tree_count"))
    suppressed = tree_count is not None and tree_count < MIN_REPORTED_TREES
    summary: dict[str, Any] = {
        "name": properties.get("nbhd_name"),
        "tree_count": None if suppressed else tree_count,
        "tree_count_suppressed": suppressed,
    }
    for metric, attribute in METRIC_ATTRIBUTES.items():
        summary[metric] = parsing.finite_float(properties.get(attribute))
    return summary


def with_metric(doc: dict[str, Any] | None, metric: Metric) -> dict[str, Any]:
    """Copy the neighborhood document tagged for one metric.

    The input document is never modified.

    Args:
        doc: Raw neighborhood document, or None when it failed to load.
        metric: Metric to display.

    Returns:
        A new GeoJSON FeatureCollection whose features carry ``metric``,
        ``metric_value`` and ``summary`` properties.
    """
    if not isinstance(doc, dict) or not isinstance(doc.get("features"), list):
        return {"type": "FeatureCollection", "features": []}

    fresh = copy.deepcopy(doc)
    attribute = METRIC_ATTRIBUTES[metric]
    features = [f for f in fresh["features"] if isinstance(f, dict)]
    for feature in features:
        properties = feature.get("properties")
        if not isinstance(properties, dict):
            properties = {}
            feature["properties"] = properties
        properties["metric"] = metric
        properties["metric_value"] = parsing.finite_float(
            properties.get(attribute)
        )
        properties["summary"] = summarize(properties)
    fresh["features"] = features
    return fresh
