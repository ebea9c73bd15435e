"""Pure workout logic: catalog, target estimation, rest timer, controller."""
