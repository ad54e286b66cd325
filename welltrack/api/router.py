"""API router configuration."""

from fastapi import APIRouter

from welltrack.api.endpoints import (
    auth,
    export,
    habit_logs,
    habits,
    imports,
    insights,
    medication_logs,
    medications,
    mood_logs,
    symptom_logs,
    symptoms,
    users,
)

api_router = APIRouter()

# Include routers
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(symptoms.router, prefix="/symptoms", tags=["Symptoms"])
api_router.include_router(habits.router, prefix="/habits", tags=["Habits"])
api_router.include_router(medications.router, prefix="/medications", tags=["Medications"])
api_router.include_router(symptom_logs.router, prefix="/symptom-logs", tags=["Symptom Logs"])
api_router.include_router(mood_logs.router, prefix="/mood-logs", tags=["Mood Logs"])
api_router.include_router(medication_logs.router, prefix="/medication-logs", tags=["Medication Logs"])
api_router.include_router(habit_logs.router, prefix="/habit-logs", tags=["Habit Logs"])
api_router.include_router(insights.router, prefix="/insights", tags=["Insights"])
api_router.include_router(export.router, prefix="/export", tags=["Export"])
api_router.include_router(imports.router, prefix="/import", tags=["Import"])
