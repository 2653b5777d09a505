"""
Map Visualization Module for CommunityWatch

Renders today's reports as an interactive Folium heat map, with a marker per
report coloured by report type and an optional pin for a new report.
"""

import html
import logging
from typing import Optional, Sequence, Tuple

import folium
from folium.plugins import HeatMap, MarkerCluster

from communitywatch.core.config import settings
from communitywatch.core.constants import HEAT_MAP_GRADIENT, HEAT_MAP_POINT_WEIGHT, REPORT_TYPE_STYLES
from communitywatch.core.date_utils import format_to_local_time
from communitywatch.core.geo_utils import Coordinates, calculate_centroid
from communitywatch.crowdsource.report_handler import Report, style_for

logger = logging.getLogger(__name__)


def _popup_html(report: Report) -> str:
    style = style_for(report.report_type)
    description = html.escape(report.description or "")
    return f"""
    <div style="font-family: Arial; min-width: 200px;">
        <h4 style="margin: 0; color: {style['color']};">{html.escape(report.report_type)}</h4>
        <hr style="margin: 5px 0;">
        <b>Reported by:</b> {html.escape(report.name or 'Anonymous')}<br>
        <b>Location:</b> {html.escape(report.location or '')}<br>
        <b>Time:</b> {format_to_local_time(report.time)}<br>
        {f"<b>Description:</b> {description}<br>" if description else ""}
    </div>
    """


def create_heat_map(
    reports: Sequence[Report],
    center: Optional[Tuple[float, float]] = None,
    zoom: Optional[int] = None,
    pin: Optional[Coordinates] = None,
    show_markers: bool = True,
) -> folium.Map:
    """
    Create an interactive map of report density.

    Args:
        reports: Reports to plot
        center: Map center (lat, lng); defaults to the user's position, then
            the reports' centroid, then the configured default
        zoom: Initial zoom level (1-18)
        pin: Pin to draw when placing a new report
        show_markers: Include a clustered marker per report

    Returns:
        Folium Map object
    """
    points = [r.coords.to_tuple() for r in reports]
    center = center or calculate_centroid(points) or settings.map_default_center

    report_map = folium.Map(
        location=list(center),
        zoom_start=zoom or settings.map_default_zoom,
        tiles="OpenStreetMap",
    )

    if reports:
        heat_data = [[lat, lng, HEAT_MAP_POINT_WEIGHT] for lat, lng in points]
        HeatMap(
            heat_data,
            name="Heat map",
            radius=25,
            blur=15,
            max_zoom=16,
            gradient=HEAT_MAP_GRADIENT,
        ).add_to(report_map)

        if show_markers:
            marker_group = MarkerCluster(name="Reports")
            for report in reports:
                color = style_for(report.report_type)["color"]
                folium.CircleMarker(
                    location=[report.coords.lat, report.coords.lng],
                    radius=8,
                    popup=folium.Popup(_popup_html(report), max_width=300),
                    color=color,
                    fill=True,
                    fill_color=color,
                    fill_opacity=0.7,
                    weight=2,
                ).add_to(marker_group)
            marker_group.add_to(report_map)
    else:
        logger.info("No reports provided, creating empty map")

    if pin is not None:
        folium.Marker(
            location=[pin.lat, pin.lng],
            tooltip="New report",
            icon=folium.Icon(color="red", icon="map-marker"),
        ).add_to(report_map)

    folium.LayerControl(position="topright").add_to(report_map)

    legend_html = f'''
    <div style="position: fixed;
                bottom: 30px; right: 30px;
                background-color: rgba(255,255,255,0.9);
                padding: 10px;
                border-radius: 5px;
                z-index: 9999;
                font-family: Arial;
                font-size: 12px;">
        <b>Report Type</b><br>
        <span style="color: {REPORT_TYPE_STYLES['crime']['color']};">●</span> Crime<br>
        <span style="color: {REPORT_TYPE_STYLES['suspicious activity']['color']};">●</span> Suspicious Activity<br>
        <span style="color: {REPORT_TYPE_STYLES['default']['color']};">●</span> Be Alert<br>
        <hr style="margin: 5px 0;">
        {len(reports)} report(s) today
    </div>
    '''
    report_map.get_root().html.add_child(folium.Element(legend_html))

    logger.info(f"Created map with {len(reports)} reports")
    return report_map


def save_heat_map(
    reports: Sequence[Report],
    output_path: str = "reports_heatmap.html",
    **kwargs,
) -> str:
    """
    Generate and save a heat map to an HTML file.

    Returns:
        Path to saved file
    """
    report_map = create_heat_map(reports, **kwargs)
    report_map.save(output_path)
    logger.info(f"Map saved to {output_path}")
    return output_path
