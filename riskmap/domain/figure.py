"""Figure builder - turns a batch of scored applicants into a map figure description"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple
from riskmap.domain.models import ApplicantRecord


@dataclass(frozen=True)
class ColorStop:
    position: float
    name: str
    hex: str


@dataclass(frozen=True)
class ColorScale:
    """Piecewise-linear color scale over a fixed [cmin, cmax] domain"""

    stops: Tuple[ColorStop, ...]
    cmin: float = 0.0
    cmax: float = 1.0

    def as_plotly(self) -> list:
        return [[stop.position, stop.hex] for stop in self.stops]

    def color_at(self, value: float) -> str:
        """
        Resolve a value to a hex color.

        Values outside [cmin, cmax] are clamped to the nearest endpoint,
        never extrapolated.
        """
        clamped = min(max(value, self.cmin), self.cmax)
        position = (clamped - self.cmin) / (self.cmax - self.cmin)

        for lower, upper in zip(self.stops, self.stops[1:]):
            if position <= upper.position:
                span = upper.position - lower.position
                t = (position - lower.position) / span if span > 0 else 0.0
                return _mix(lower.hex, upper.hex, t)

        return self.stops[-1].hex


def _mix(start_hex: str, end_hex: str, t: float) -> str:
    start = [int(start_hex[i:i + 2], 16) for i in (1, 3, 5)]
    end = [int(end_hex[i:i + 2], 16) for i in (1, 3, 5)]
    channels = [round(a + (b - a) * t) for a, b in zip(start, end)]
    return "#" + "".join(f"{c:02x}" for c in channels)


# Fixed so colors stay comparable across age weights
RISK_COLOR_SCALE = ColorScale(
    stops=(
        ColorStop(0.0, "green", "#2dc937"),
        ColorStop(0.5, "amber", "#e7b416"),
        ColorStop(1.0, "red", "#cc3232"),
    ),
    cmin=0.0,
    cmax=1.0,
)

HOVER_TEMPLATE = (
    "Age: %{customdata[0]:.0f}<br>"
    "Prior Claims: %{customdata[1]:.0f}<br>"
    "Credit Band: %{customdata[2]}<br>"
    "Geo Risk: %{customdata[3]:.2f}<br>"
    "Asset Value: $%{customdata[4]:,.0f}<br>"
    "Risk Score: %{customdata[5]:.3f}<extra></extra>"
)


@dataclass(frozen=True)
class MapCenter:
    lat: float
    lon: float


@dataclass(frozen=True)
class PointLayer:
    """Scatter layer of applicant locations, colored by risk score"""

    lat: Tuple[float, ...]
    lon: Tuple[float, ...]
    color: Tuple[float, ...]
    customdata: Tuple[tuple, ...]
    colorscale: ColorScale = RISK_COLOR_SCALE
    hovertemplate: str = HOVER_TEMPLATE
    marker_size: int = 6
    opacity: float = 0.8

    def __len__(self) -> int:
        return len(self.lat)


@dataclass(frozen=True)
class FigureDescription:
    """Renderer-agnostic map figure: layers plus title and camera framing"""

    layers: Tuple[PointLayer, ...] = ()
    title: str = ""
    center: Optional[MapCenter] = None
    zoom: int = 9
    map_style: str = "open-street-map"
    height: int = 600
    margin: Tuple[int, int, int, int] = (20, 20, 40, 20)  # l, r, t, b

    @property
    def is_empty(self) -> bool:
        return not self.layers

    @property
    def point_count(self) -> int:
        return sum(len(layer) for layer in self.layers)

    def point_colors(self) -> Tuple[str, ...]:
        """Resolved hex color per point, in render order"""
        return tuple(
            layer.colorscale.color_at(value)
            for layer in self.layers
            for value in layer.color
        )


EMPTY_FIGURE = FigureDescription()


def format_title(weight: float) -> str:
    return f"Risk Scores (Age Weight {weight:.2f}x)"


def build_figure(records: Sequence[ApplicantRecord], weight: float) -> Optional[FigureDescription]:
    """
    Build the map figure for a batch of applicants at a given age weight.

    Returns None for an empty batch so callers keep whatever figure is
    already on screen. The weight is only used for the title; range checks
    belong to the caller.
    """
    if not records:
        return None

    lats, lons, risks, payloads = [], [], [], []
    lat_total = 0.0
    lon_total = 0.0

    for record in records:
        lats.append(record.lat)
        lons.append(record.lon)
        risks.append(record.risk_score)
        payloads.append(record.tooltip_payload())
        lat_total += record.lat
        lon_total += record.lon

    layer = PointLayer(
        lat=tuple(lats),
        lon=tuple(lons),
        color=tuple(risks),
        customdata=tuple(payloads),
    )

    return FigureDescription(
        layers=(layer,),
        title=format_title(weight),
        center=MapCenter(lat=lat_total / len(records), lon=lon_total / len(records)),
    )
