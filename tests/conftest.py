import pytest

from skills_manager import Colors


@pytest.fixture(autouse=True)
def no_colors():
    """Plain output so assertions can match icons and names directly."""
    Colors.disable()
