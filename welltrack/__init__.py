"""WellTrack personal health-tracking API."""
