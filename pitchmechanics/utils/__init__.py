"""
Parsers, kinematics and diagnostics for motion capture exports.
"""

from .diagnostics import (
    DiagnosticKind, DiagnosticEvent, LoggingDiagnostics, CollectingDiagnostics, MultiDiagnostics
)
from .tabular_parser import (
    TableFormat, FormatInfo, ParsedTable, detect_format, parse_table, split_delimited_line
)
from .quaternion_kinematics import (
    EulerAngles, normalize_quaternion, validate_quaternion, quaternion_to_euler, euler_to_quaternion,
    wrap_angle, twist_velocity, external_rotation, trunk_separation
)
from .joint_parsers import (
    JointCenterParser, JointRotationParser, BaseballMetricsParser,
    parse_joint_centers, parse_joint_rotations, parse_baseball_metrics
)

__all__ = [
    "DiagnosticKind",
    "DiagnosticEvent",
    "LoggingDiagnostics",
    "CollectingDiagnostics",
    "MultiDiagnostics",
    "TableFormat",
    "FormatInfo",
    "ParsedTable",
    "detect_format",
    "parse_table",
    "split_delimited_line",
    "EulerAngles",
    "normalize_quaternion",
    "validate_quaternion",
    "quaternion_to_euler",
    "euler_to_quaternion",
    "wrap_angle",
    "twist_velocity",
    "external_rotation",
    "trunk_separation",
    "JointCenterParser",
    "JointRotationParser",
    "BaseballMetricsParser",
    "parse_joint_centers",
    "parse_joint_rotations",
    "parse_baseball_metrics",
]
