"""Background theme derived from the current snapshot."""

from enum import Enum

from weatherverse.models import WeatherSnapshot


class WeatherTheme(str, Enum):
    SUNNY = "bg-sunny"
    CLOUDY = "bg-cloudy"
    RAINY = "bg-rainy"
    SNOWY = "bg-snowy"
    DEFAULT = "bg-default"


# First match wins.
_RULES: tuple[tuple[tuple[str, ...], WeatherTheme], ...] = (
    (("sun", "clear"), WeatherTheme.SUNNY),
    (("cloud",), WeatherTheme.CLOUDY),
    (("rain", "drizzle"), WeatherTheme.RAINY),
    (("snow",), WeatherTheme.SNOWY),
)

# Page backgrounds per theme, applied by the view.
GRADIENTS: dict[WeatherTheme, str] = {
    WeatherTheme.SUNNY: "linear-gradient(180deg, #1e88e5 0%, #42a5f5 40%, #ffd54f 100%)",
    WeatherTheme.CLOUDY: "linear-gradient(180deg, #546e7a 0%, #78909c 50%, #90a4ae 100%)",
    WeatherTheme.RAINY: "linear-gradient(180deg, #263238 0%, #37474f 50%, #546e7a 100%)",
    WeatherTheme.SNOWY: "linear-gradient(180deg, #90a4ae 0%, #cfd8dc 50%, #eceff1 100%)",
    WeatherTheme.DEFAULT: "linear-gradient(180deg, #1a1a2e 0%, #16213e 50%, #0f3460 100%)",
}


def classify(snapshot: WeatherSnapshot | None) -> WeatherTheme:
    """Pick a theme by case-insensitive substring match on the condition label."""
    if snapshot is None:
        return WeatherTheme.DEFAULT
    condition = snapshot.conditions.lower()
    for needles, theme in _RULES:
        if any(n in condition for n in needles):
            return theme
    return WeatherTheme.DEFAULT
