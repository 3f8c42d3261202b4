"""Prize2Pride spaced-repetition and usage-metering core."""
