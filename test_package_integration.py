#!/usr/bin/env python3
"""
Test script to verify PitchMechanics package imports and the ingestion pipeline.

Can be run directly or collected by pytest.
"""

import logging
import sys
from pathlib import Path

import pytest

# Add project root to path for testing
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))


def test_imports():
    """Test that all package imports work correctly."""
    print("🧪 Testing PitchMechanics Package Imports...")

    import pitchmechanics
    print(f"✅ Package version: {pitchmechanics.__version__}")

    from pitchmechanics import (
        IngestionConfig,
        JointCenterParser,
        JointRotationParser,
        BaseballMetricsParser,
        BiomechanicsDeriver,
        MotionDataset,
        load_motion_data,
        load_motion_files,
        CollectingDiagnostics,
    )
    from pitchmechanics.data import combine_data, calculate_biomechanics, fallback_curve
    from pitchmechanics.utils import parse_table, validate_quaternion, MultiDiagnostics
    from pitchmechanics.data.skeleton_graph import dataset_to_graphs
    from pitchmechanics.visualization import plot_metric_series

    print("✅ All core classes imported successfully!")


def test_package_structure():
    """Test package structure and __all__ attributes."""
    print("\n📦 Testing Package Structure...")

    import pitchmechanics
    import pitchmechanics.data
    import pitchmechanics.utils

    for module in (pitchmechanics, pitchmechanics.data, pitchmechanics.utils):
        print(f"✅ {module.__name__} __all__: {len(module.__all__)} items")
        for item in module.__all__:
            assert hasattr(module, item), f"{module.__name__} is missing {item}"


def test_config_round_trip():
    from pitchmechanics import IngestionConfig

    config = IngestionConfig.from_dict({'min_valid_fraction': 0.25, 'fallback_seed': 4})
    assert config.min_valid_fraction == 0.25
    assert IngestionConfig.from_dict(config.to_dict()) == config
    assert config.threshold_for('trunk_separation') == config.signal_threshold

    with pytest.raises(ValueError, match="Unknown"):
        IngestionConfig.from_dict({'frame_rate': 120.0})


def test_default_diagnostics_go_to_logging(caplog, make_centers_text):
    from pitchmechanics import load_motion_data

    lines = make_centers_text(rows=3).splitlines()
    lines[1] = "0.1 0.2"
    with caplog.at_level(logging.DEBUG, logger="PitchMechanics"):
        load_motion_data('\n'.join(lines), "")

    dropped = [r for r in caplog.records if r.name == "PitchMechanics.joint_centers"
               and r.levelno == logging.WARNING]
    assert len(dropped) == 1
    assert "[frame 1]" in dropped[0].getMessage()


def test_multi_diagnostics_fan_out(make_centers_text, make_rotations_text):
    from pitchmechanics import CollectingDiagnostics, DiagnosticKind, load_motion_data
    from pitchmechanics.utils import MultiDiagnostics

    first, second = CollectingDiagnostics(), CollectingDiagnostics()
    load_motion_data(make_centers_text(rows=2), make_rotations_text([{}, {}]),
                     diagnostics=MultiDiagnostics(first, second))

    assert len(first) == len(second) > 0
    assert first.count(DiagnosticKind.FALLBACK_TRIGGERED) == 1
    first.clear()
    assert len(first) == 0


def main():
    """Run the import checks without pytest."""
    print("🚀 PitchMechanics Package Integration Test")
    print("=" * 50)

    checks = [test_imports, test_package_structure, test_config_round_trip]
    success_count = 0
    for check in checks:
        try:
            check()
            success_count += 1
        except Exception as e:
            print(f"❌ {check.__name__} failed: {e}")

    print("\n" + "=" * 50)
    print(f"📊 Test Results: {success_count}/{len(checks)} tests passed")

    if success_count == len(checks):
        print("🎉 All tests passed! PitchMechanics package is ready to use.")
        print("\n💡 Usage Example:")
        print("   from pitchmechanics import load_motion_files")
        print("   dataset = load_motion_files(['jointCenters.txt', 'jointRotations.txt'])")
        print("   dataset.get_summary()")
        return True
    print("❌ Some tests failed. Please check the errors above.")
    return False


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
