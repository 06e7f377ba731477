"""Export of traced ridge networks as GeoJSON."""

import json
from pathlib import Path
from typing import Any, Dict, Union

import structlog
from shapely.geometry import LineString, Point, mapping

from ..core.watershed import WatershedNetwork

logger = structlog.get_logger()


def network_to_geojson(network: WatershedNetwork) -> Dict[str, Any]:
    """
    Convert a watershed network to a GeoJSON FeatureCollection.

    Each traced path becomes a 3D LineString feature. A path that never
    left its saddle is exported as a Point.
    """
    features = []
    for index, path in enumerate(network.all_paths()):
        coordinates = path.coordinates()
        if len(coordinates) < 2:
            geometry = Point(coordinates[0])
        else:
            geometry = LineString(coordinates)
        features.append({
            "type": "Feature",
            "id": index,
            "geometry": mapping(geometry),
            "properties": {
                "saddle": path.start_vertex,
                "termination": path.termination.value,
                "points": len(coordinates),
            },
        })

    logger.info("Ridge lines exported", features=len(features))
    return {
        "type": "FeatureCollection",
        "features": features,
        "properties": network.summary(),
    }


def write_geojson(network: WatershedNetwork, path: Union[str, Path]) -> Path:
    """Write the network's ridge lines to a GeoJSON file."""
    path = Path(path)
    collection = network_to_geojson(network)
    path.write_text(json.dumps(collection, indent=2))
    logger.info("GeoJSON written", path=str(path))
    return path
