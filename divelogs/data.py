"""
divelogs.de XML import/export format.

The document has a fixed DIVELOGSDATA root with one element per field.
Free-text fields are wrapped in CDATA and omitted when empty; samples are
repeated SAMPLE elements carrying only a DEPTH at a fixed interval.
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional
from xml.dom import minidom

from smarttrak.dive import Dive
from smarttrak.profile import SAMPLE_INTERVAL

ROOT_TAG = "DIVELOGSDATA"
DATE_FORMAT = "%d.%m.%Y"
TIME_FORMAT = "%H:%M:%S"


@dataclass
class Sample:
    """A single datapoint in the dive's timeseries data."""

    depth: float = 0.0


@dataclass
class Cylinder:
    """Information about the cylinders used."""

    name: str = ""
    description: str = ""
    doubles: bool = False
    size: float = 0.0
    start_pressure: float = 0.0
    end_pressure: float = 0.0
    working_pressure: float = 0.0


@dataclass
class Data:
    """One dive as exchanged with divelogs.de."""

    id: int = 0
    dive_number: int = 0
    time: Optional[datetime] = None
    dive_duration: timedelta = timedelta(0)
    surface_duration: timedelta = timedelta(0)
    max_depth: float = 0.0
    mean_depth: float = 0.0
    location: str = ""
    site: str = ""
    weather: str = ""
    visibility: str = ""
    air_temperature: float = 0.0
    max_depth_temperature: float = 0.0
    dive_end_temperature: float = 0.0
    partner: str = ""
    boat: str = ""
    cylinder: Cylinder = field(default_factory=Cylinder)
    weight: float = 0.0
    o2_percent: float = 0.0
    he_percent: float = 0.0
    log_notes: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    zoom_level: int = 0
    sample_interval: timedelta = SAMPLE_INTERVAL
    samples: List[Sample] = field(default_factory=list)


def _fmt_float(value: float) -> str:
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _seconds(duration: timedelta) -> str:
    return str(int(round(duration.total_seconds())))


def to_xml(data: Data) -> str:
    """
    Serialize Data into a divelogs.de XML document.

    Args:
        data: Dive to serialize

    Returns:
        XML string without declaration
    """
    doc = minidom.Document()
    root = doc.createElement(ROOT_TAG)
    doc.appendChild(root)

    def add(tag: str, text: str, parent=root) -> None:
        elem = doc.createElement(tag)
        elem.appendChild(doc.createTextNode(text))
        parent.appendChild(elem)

    def add_cdata(tag: str, text: str) -> None:
        if not text:
            return
        elem = doc.createElement(tag)
        elem.appendChild(doc.createCDATASection(text))
        root.appendChild(elem)

    cyl = data.cylinder

    add("DIVELOGSID", str(data.id))
    add("DIVELOGSDIVENUMBER", str(data.dive_number))
    add("DATE", data.time.strftime(DATE_FORMAT) if data.time else "")
    add("TIME", data.time.strftime(TIME_FORMAT) if data.time else "")
    add("DIVETIMESEC", _seconds(data.dive_duration))
    add("SURFACETIME", _seconds(data.surface_duration))
    add("MAXDEPTH", _fmt_float(data.max_depth))
    add("MEANDEPTH", _fmt_float(data.mean_depth))
    add_cdata("LOCATION", data.location)
    add_cdata("SITE", data.site)
    add_cdata("WEATHER", data.weather)
    add_cdata("WATERVIZIBILITY", data.visibility)  # sic
    add("AIRTEMP", _fmt_float(data.air_temperature))
    add("WATERTEMPMAXDEPTH", _fmt_float(data.max_depth_temperature))
    add("WATERTEMPATEND", _fmt_float(data.dive_end_temperature))
    add_cdata("PARTNER", data.partner)
    add_cdata("BOATNAME", data.boat)
    add_cdata("CYLINDERNAME", cyl.name)
    add_cdata("CYLINDERDESCRIPTION", cyl.description)
    add("DBLTANK", "1" if cyl.doubles else "0")
    add("CYLINDERSIZE", _fmt_float(cyl.size))
    add("CYLINDERSTARTPRESSURE", _fmt_float(cyl.start_pressure))
    add("CYLINDERENDPRESSURE", _fmt_float(cyl.end_pressure))
    add("WORKINGPRESSURE", _fmt_float(cyl.working_pressure))
    add("WEIGHT", _fmt_float(data.weight))
    add("O2PCT", _fmt_float(data.o2_percent))
    add("HEPCT", _fmt_float(data.he_percent))
    add_cdata("LOGNOTES", data.log_notes)
    if data.latitude:
        add("LAT", _fmt_float(data.latitude))
    if data.longitude:
        add("LNG", _fmt_float(data.longitude))
    add("GOOGLEMAPSZOOMLEVEL", str(data.zoom_level))
    add("SAMPLEINTERVAL", _seconds(data.sample_interval))
    for sample in data.samples:
        elem = doc.createElement("SAMPLE")
        add("DEPTH", _fmt_float(sample.depth), parent=elem)
        root.appendChild(elem)

    return root.toxml()


def from_xml(content: str) -> Data:
    """
    Parse a divelogs.de XML document.

    DATE and TIME are combined into a naive local datetime.

    Raises:
        ValueError: If the document is not well-formed or has another root
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise ValueError(f"Failed to parse divelogs XML: {e}") from e

    if root.tag != ROOT_TAG:
        raise ValueError(f"Unexpected root element <{root.tag}>, want <{ROOT_TAG}>")

    def text(tag: str) -> str:
        return (root.findtext(tag) or "").strip()

    def number(tag: str) -> float:
        value = text(tag)
        return float(value) if value else 0.0

    def integer(tag: str) -> int:
        value = text(tag)
        return int(value) if value else 0

    time = None
    if text("DATE"):
        time = datetime.strptime(f"{text('DATE')} {text('TIME')}", f"{DATE_FORMAT} {TIME_FORMAT}")

    return Data(
        id=integer("DIVELOGSID"),
        dive_number=integer("DIVELOGSDIVENUMBER"),
        time=time,
        dive_duration=timedelta(seconds=integer("DIVETIMESEC")),
        surface_duration=timedelta(seconds=integer("SURFACETIME")),
        max_depth=number("MAXDEPTH"),
        mean_depth=number("MEANDEPTH"),
        location=text("LOCATION"),
        site=text("SITE"),
        weather=text("WEATHER"),
        visibility=text("WATERVIZIBILITY"),
        air_temperature=number("AIRTEMP"),
        max_depth_temperature=number("WATERTEMPMAXDEPTH"),
        dive_end_temperature=number("WATERTEMPATEND"),
        partner=text("PARTNER"),
        boat=text("BOATNAME"),
        cylinder=Cylinder(
            name=text("CYLINDERNAME"),
            description=text("CYLINDERDESCRIPTION"),
            doubles=integer("DBLTANK") != 0,
            size=number("CYLINDERSIZE"),
            start_pressure=number("CYLINDERSTARTPRESSURE"),
            end_pressure=number("CYLINDERENDPRESSURE"),
            working_pressure=number("WORKINGPRESSURE"),
        ),
        weight=number("WEIGHT"),
        o2_percent=number("O2PCT"),
        he_percent=number("HEPCT"),
        log_notes=text("LOGNOTES"),
        latitude=number("LAT"),
        longitude=number("LNG"),
        zoom_level=integer("GOOGLEMAPSZOOMLEVEL"),
        sample_interval=timedelta(seconds=integer("SAMPLEINTERVAL")),
        samples=[
            Sample(depth=float((s.findtext("DEPTH") or "0").strip() or 0))
            for s in root.findall("SAMPLE")
        ],
    )


def from_dive(dive: Dive, location: str = "", site: str = "") -> Data:
    """
    Map a decoded SmartTrak dive onto the divelogs.de schema.

    Only depth is carried per sample; timestamps and event flags have no
    place in the format.
    """
    return Data(
        dive_number=dive.sequence,
        time=dive.time,
        dive_duration=dive.duration,
        surface_duration=dive.surface_interval,
        max_depth=dive.max_depth,
        mean_depth=dive.average_depth,
        location=location,
        site=site,
        air_temperature=dive.air_temperature,
        max_depth_temperature=dive.min_temperature,
        dive_end_temperature=dive.deco_temperature,
        o2_percent=float(dive.percent_o2),
        he_percent=float(dive.percent_he),
        sample_interval=SAMPLE_INTERVAL,
        samples=[Sample(depth=p.depth) for p in dive.profile],
    )
