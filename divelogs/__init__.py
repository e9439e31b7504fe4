"""
divelogs.de export format.

Converts decoded SmartTrak dives into the XML documents accepted by
divelogs.de and reads such documents back.
"""

from divelogs.data import Data, Cylinder, Sample, to_xml, from_xml, from_dive

__all__ = [
    "Data",
    "Cylinder",
    "Sample",
    "to_xml",
    "from_xml",
    "from_dive",
]
