"""TripSync backend package."""
