from loralink_compost.config.driverspec import (
    DriverSpec,
    FormatSpec,
    LoggingSpec,
    load_driverspec,
    save_driverspec,
)

__all__ = [
    "DriverSpec",
    "FormatSpec",
    "LoggingSpec",
    "load_driverspec",
    "save_driverspec",
]
