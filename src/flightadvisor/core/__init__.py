"""Core infrastructure shared by all FlightAdvisor services."""
