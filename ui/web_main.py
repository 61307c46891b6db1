"""
Web UI module for the SafeSpeed system.

This module provides a Streamlit-based web interface for the fleet safety
dashboard. Anonymous visitors can log in or register; administrators edit the
speed configuration; drivers recalculate their maximum safe speed, optionally
with live weather, and review the calculation history.
"""

import sys
from pathlib import Path
from typing import Optional

# Add project root to Python path to enable imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import streamlit as st
from streamlit_autorefresh import st_autorefresh

from safespeed.auth import AuthService, User
from safespeed.calculation_result import WEATHER_OFFLINE, CalculationResult
from safespeed.labels import day_period_label, precipitation_label, surface_label
from safespeed.logging_config import configure_logging
from safespeed.road import Surface
from safespeed.settings import Settings, load_settings
from safespeed.speed_calculator import SpeedCalculator
from safespeed.speed_config import DEFAULT_CONFIG, Location, parse_config_form
from safespeed.storage import KeyValueStore
from safespeed.weather import DayPeriod
from safespeed.weather_client import OpenMeteoClient

# Weather is refreshed this often while the driver has it switched on
WEATHER_REFRESH_MS = 5 * 60 * 1000

FACTOR_LABELS = {
    "surface": "Surface",
    "day_period": "Day period",
    "precipitation": "Precipitation",
    "wind": "Wind",
}


@st.cache_resource
def get_settings() -> Settings:
    settings = load_settings()
    configure_logging(settings.log_dir)
    return settings


@st.cache_resource
def get_store() -> KeyValueStore:
    return KeyValueStore(get_settings().data_file)


@st.cache_resource
def get_weather_client() -> OpenMeteoClient:
    settings = get_settings()
    return OpenMeteoClient(base_url=settings.weather_url, timeout=settings.weather_timeout)


def get_auth_service() -> AuthService:
    return AuthService(get_store())


def get_calculator() -> SpeedCalculator:
    return SpeedCalculator(get_store(), get_weather_client())


def current_user(auth: AuthService) -> Optional[User]:
    """
    Resolves the logged-in user for this browser session.

    Drops the stored id if the account no longer exists.
    """
    user = auth.find_user(st.session_state.get("user_id"))
    if user is None:
        st.session_state.pop("user_id", None)
    return user


def render_login(auth: AuthService) -> None:
    """Renders the login and registration forms."""
    st.header("Sign in")
    login_tab, register_tab = st.tabs(["Login", "Register"])

    with login_tab:
        with st.form("login_form"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Login")
        if submitted:
            user, error = auth.login(email, password)
            if user is not None:
                st.session_state.user_id = user.id
                st.rerun()
            else:
                st.error(error)

    with register_tab:
        with st.form("register_form"):
            email = st.text_input("Email", key="register_email")
            password = st.text_input("Password", type="password", key="register_password")
            role = st.selectbox("Role", ["driver", "admin"])
            submitted = st.form_submit_button("Create account")
        if submitted:
            user, error = auth.register(email, password, role)
            if user is not None:
                st.session_state.user_id = user.id
                st.rerun()
            else:
                st.error(error)


def render_admin_settings(calculator: SpeedCalculator) -> None:
    """
    Renders the admin configuration form.

    Invalid fields are reported next to the field; the stored configuration
    is only replaced when the whole form is valid.
    """
    st.header("Speed Configuration")

    if st.session_state.pop("reset_config", False):
        config = DEFAULT_CONFIG
    else:
        config = calculator.load_config() or DEFAULT_CONFIG

    surfaces = [s.value for s in Surface]
    day_periods = [d.value for d in DayPeriod]

    with st.form("config_form"):
        base_speed_limit = st.text_input(
            "Base speed limit (km/h)",
            value=f"{config.base_speed_limit:g}",
            help="Between 1 and 200 km/h"
        )
        field_error = st.empty()
        surface = st.selectbox(
            "Road surface",
            surfaces,
            index=surfaces.index(config.surface.value),
            format_func=lambda v: surface_label(Surface(v))
        )
        day_period = st.selectbox(
            "Day period",
            day_periods,
            index=day_periods.index(config.day_period.value),
            format_func=lambda v: day_period_label(DayPeriod(v))
        )
        enable_external_weather = st.checkbox(
            "Allow drivers to apply live weather",
            value=config.enable_external_weather
        )
        location = config.default_location
        set_location = st.checkbox("Set a default weather location", value=location is not None)
        lat = st.number_input("Default latitude", min_value=-90.0, max_value=90.0,
                              value=location.lat if location else 0.0, format="%.4f")
        lon = st.number_input("Default longitude", min_value=-180.0, max_value=180.0,
                              value=location.lon if location else 0.0, format="%.4f")
        save = st.form_submit_button("Save configuration")

    if st.button("Reset to defaults"):
        st.session_state.reset_config = True
        st.rerun()

    if save:
        new_config, errors = parse_config_form(
            base_speed_limit,
            surface,
            day_period,
            enable_external_weather,
            default_location=Location(lat=lat, lon=lon) if set_location else None,
        )
        if errors:
            if "base_speed_limit" in errors:
                field_error.error(errors["base_speed_limit"])
            for field_name, message in errors.items():
                if field_name != "base_speed_limit":
                    st.error(message)
        elif calculator.save_config(new_config):
            st.success("Configuration saved")
        else:
            st.error("Failed to save configuration. Please try again.")


def render_result(result: CalculationResult) -> None:
    """Displays the latest calculation with its factor breakdown."""
    st.metric("🚗 Maximum safe speed (km/h)", result.max_safe_speed)

    if result.weather_error:
        st.warning(f"Weather error: {result.weather_error}")
    if result.weather_source == WEATHER_OFFLINE:
        st.info("Weather provider unreachable: using the last known weather.")
    if not result.history_saved:
        st.warning("The calculation could not be saved to the history.")

    with st.expander("🧠 Factor breakdown", expanded=True):
        for name, factor in result.factors.items():
            st.write(f"- {FACTOR_LABELS[name]}: ×{factor:g}")
        if result.weather is not None:
            weather = result.weather
            st.caption(
                f"Weather at {weather.time_iso}: {weather.temp_c:g} °C, "
                f"{precipitation_label(weather.precipitation_type)} "
                f"({weather.precipitation_mm:g} mm), wind {weather.wind_kph:g} km/h"
            )


def render_driver_dashboard(calculator: SpeedCalculator, settings: Settings) -> None:
    """Renders the driver view: configuration summary, recalculation and history."""
    st.header("Driver Dashboard")

    config = calculator.load_config()
    if config is None:
        st.info("No speed configuration yet. Ask an administrator to set one up.")
        return

    left_col, right_col = st.columns(2)

    with left_col:
        st.subheader("Current configuration")
        st.write(f"**Base speed limit:** {config.base_speed_limit:g} km/h")
        st.write(f"**Surface:** {surface_label(config.surface)}")
        st.write(f"**Day period:** {day_period_label(config.day_period)}")

        use_external_weather = False
        location = None
        auto_recalculate = False
        if config.enable_external_weather:
            use_external_weather = st.toggle("Use live weather")
            default_location = config.default_location or settings.default_location
            lat = st.number_input("Latitude", min_value=-90.0, max_value=90.0,
                                  value=default_location.lat, format="%.4f")
            lon = st.number_input("Longitude", min_value=-180.0, max_value=180.0,
                                  value=default_location.lon, format="%.4f")
            location = Location(lat=lat, lon=lon)
            if use_external_weather:
                refresh_count = st_autorefresh(interval=WEATHER_REFRESH_MS, limit=None, key="weather_refresh")
                # Recalculate with fresh weather on each timed refresh
                if refresh_count > st.session_state.get("weather_refresh_count", 0):
                    st.session_state.weather_refresh_count = refresh_count
                    auto_recalculate = "last_result" in st.session_state
        else:
            st.caption("Live weather is disabled by the administrator.")

        if st.button("Recalculate", type="primary") or auto_recalculate:
            st.session_state.last_result = calculator.recalculate(use_external_weather, location)

    with right_col:
        result = st.session_state.get("last_result")
        if result is not None:
            render_result(result)
        else:
            st.caption("Press Recalculate to compute the maximum safe speed.")

    st.divider()
    st.subheader("Calculation History")
    history = calculator.history.to_dataframe()
    if history.empty:
        st.caption("No calculations yet.")
        return

    st.dataframe(history, use_container_width=True, hide_index=True)

    confirm = st.checkbox("I understand clearing the history cannot be undone")
    if st.button("Clear History", disabled=not confirm):
        if calculator.history.clear():
            st.session_state.pop("last_result", None)
            st.rerun()
        else:
            st.error("Failed to clear the history.")


def main() -> None:
    """
    Main function that runs the Streamlit web interface.

    Routes the visitor to the login page, the admin settings or the driver
    dashboard depending on the session's user and role.
    """
    st.set_page_config(page_title="Fleet Safety - Safe Speed", layout="wide")
    st.title("Fleet Safety - Safe Speed")

    settings = get_settings()
    auth = get_auth_service()
    user = current_user(auth)

    if user is None:
        render_login(auth)
        return

    st.sidebar.write(f"Signed in as **{user.email}** ({user.role})")
    if st.sidebar.button("Logout"):
        st.session_state.clear()
        st.rerun()

    calculator = get_calculator()
    if user.is_admin:
        render_admin_settings(calculator)
    else:
        render_driver_dashboard(calculator, settings)


if __name__ == "__main__":
    main()
