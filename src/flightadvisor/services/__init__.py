"""FlightAdvisor services: weather, runways, decisions and the advisor pipeline."""
