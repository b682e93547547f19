"""Data layer and domain model for an exercise submission and grading platform."""
