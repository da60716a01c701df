"""Constants for period_tracker."""

from logging import Logger, getLogger

LOGGER: Logger = getLogger(__package__)

DOMAIN = "period_tracker"
ATTRIBUTION = "Cycle data calculated locally"

CONF_LAST_PERIOD = "last_period_start"
CONF_PERIOD_LENGTH = "period_length"
CONF_FILL_POLICY = "fill_policy"
CONF_DEFAULT_CYCLE_LENGTH = "default_cycle_length"
CONF_DEFAULT_PERIOD_LENGTH = "default_period_length"
CONF_SHOW_FORECAST_ON_CAL = "show_forecast_on_calendar"
CONF_SHOW_FERTILITY_ON_CAL = "show_fertility_on_calendar"

DEFAULT_CYCLE_LENGTH = 28
DEFAULT_PERIOD_LENGTH = 5

# Luteal phase length used to estimate the ovulation day
LUTEAL_PHASE_DAYS = 14
HIGH_CHANCE_DAYS = 2
MEDIUM_CHANCE_DAYS = 5

# Upper bound of projected cycles when forecasting period days
FORECAST_CYCLES = 24

TITLE_NO_DATA = "no data"
TITLE_DAY_OF_PERIOD = "day of period"
TITLE_UNTIL_PERIOD = "until period"

CHANCE_LOW = "low"
CHANCE_MEDIUM = "medium"
CHANCE_HIGH = "high"
CHANCE_LEVELS: tuple[str, ...] = (CHANCE_LOW, CHANCE_MEDIUM, CHANCE_HIGH)

ANNOTATION_FORECAST_TODAY = "forecast_today"
ANNOTATION_FORECAST = "forecast"
ANNOTATION_PERIOD = "period"

FILL_TODAY = "today"
FILL_BRIDGE = "bridge"
FILL_POLICIES: tuple[str, ...] = (FILL_TODAY, FILL_BRIDGE)
