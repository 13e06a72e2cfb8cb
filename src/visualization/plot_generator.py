# visualization/plot_generator.py
import plotly.graph_objects as go
from typing import Dict, Iterable, Optional, Sequence
import logging

from config import config
from data.models import FloatRecord, ProfileSeries, parameter_info
from explorer.comparison import ComparisonSeries
from explorer.selection import DEFAULT_PALETTE

logger = logging.getLogger(__name__)


class ExplorerPlotGenerator:
    """Builds plotly figures for the explorer views; rendering them is up to the caller"""

    def __init__(self, palette: Optional[Sequence[str]] = None, template: Optional[str] = None):
        self.palette = tuple(palette or config.get('selection.palette', DEFAULT_PALETTE))
        self.template = template or config.get('visualization.default_theme', 'plotly_white')
        self.height = config.get('visualization.height', 500)
        self.status_colors = {
            'active': '#10b981',
            'inactive': '#9ca3af'
        }

    def create_comparison_plot(self, series: ComparisonSeries,
                               labels: Optional[Dict[str, str]] = None) -> go.Figure:
        """Overlay one depth profile per selected float, coloured by selection slot"""
        info = parameter_info(series.parameter)
        if not series.float_ids:
            return self._create_empty_plot("Select floats to start comparing")
        if series.is_empty:
            return self._create_empty_plot(f"No {info.label.lower()} data for the selected floats")

        labels = labels or {}
        fig = go.Figure()

        for slot, float_id in enumerate(series.float_ids, start=1):
            color = self.palette[(slot - 1) % len(self.palette)]
            # Absent readings stay None so the line breaks instead of dropping to zero
            fig.add_trace(
                go.Scatter(
                    x=[row.get(slot) for row in series.rows],
                    y=series.depths,
                    mode='lines+markers',
                    name=labels.get(float_id, f"Float {float_id}"),
                    line=dict(color=color, width=2),
                    marker=dict(color=color, size=6),
                    connectgaps=False
                )
            )

        fig.update_layout(
            title=f"{info.label} Profile Comparison",
            xaxis_title=self._axis_title(series.parameter),
            yaxis_title="Depth (m)",
            yaxis=dict(autorange='reversed'),
            height=self.height,
            template=self.template,
            showlegend=True
        )
        return fig

    def create_profile_plot(self, profile: ProfileSeries, parameter: str = 'temperature') -> go.Figure:
        """Single float parameter-vs-depth profile"""
        values = profile.values(parameter)
        if not values:
            return self._create_empty_plot(f"No {parameter} data for float {profile.float_id}")

        info = parameter_info(parameter)
        fig = go.Figure(
            go.Scatter(
                x=[v for _, v in values],
                y=[d for d, _ in values],
                mode='lines+markers',
                name=info.label,
                line=dict(color=self.palette[0], width=2)
            )
        )
        fig.update_layout(
            title=f"{info.label} vs Depth: Float {profile.float_id}",
            xaxis_title=self._axis_title(parameter),
            yaxis_title="Depth (m)",
            yaxis=dict(autorange='reversed'),
            height=self.height,
            template=self.template
        )
        return fig

    def create_float_map(self, floats: Iterable[FloatRecord], selected_id: Optional[str] = None) -> go.Figure:
        """Float positions coloured by status; the selected float is drawn larger"""
        records = list(floats)
        if not records:
            return self._create_empty_plot("No floats match the current filters")

        fig = go.Figure()
        for status, color in self.status_colors.items():
            group = [r for r in records if r.status.value == status]
            if not group:
                continue
            fig.add_trace(
                go.Scattergeo(
                    lat=[r.lat for r in group],
                    lon=[r.lon for r in group],
                    text=[f"Float {r.id}<br>{r.region}<br>Last update: {r.last_update}" for r in group],
                    mode='markers',
                    name=status.title(),
                    marker=dict(
                        color=color,
                        size=[14 if r.id == selected_id else 8 for r in group],
                        line=dict(width=1, color='white')
                    )
                )
            )

        fig.update_layout(
            title=f"Global ARGO Float Map ({len(records)} floats)",
            geo=dict(showland=True, showocean=True, oceancolor='#e0f2fe', projection_type='natural earth'),
            height=self.height,
            template=self.template
        )
        return fig

    def _axis_title(self, parameter: str) -> str:
        info = parameter_info(parameter)
        return f"{info.label} ({info.unit})" if info.unit else info.label

    def _create_empty_plot(self, message: str = "No data available") -> go.Figure:
        """Create empty plot with message"""
        fig = go.Figure()
        fig.add_annotation(
            text=message,
            xref="paper", yref="paper",
            x=0.5, y=0.5, xanchor='center', yanchor='middle',
            showarrow=False,
            font=dict(size=16, color="gray")
        )
        fig.update_layout(
            plot_bgcolor='white',
            height=400,
            xaxis=dict(showgrid=False, zeroline=False, showticklabels=False),
            yaxis=dict(showgrid=False, zeroline=False, showticklabels=False)
        )
        return fig
