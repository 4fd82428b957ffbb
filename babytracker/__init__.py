"""
BabyTracker Pro backend.

Structure:
- config.py                : settings from the environment / .env, logging setup
- db.py                    : SQLAlchemy engine and sessions
- models.py                : ORM models
- services.py              : users, settings, babies, tracking entries, live data
- health_service.py        : providers, appointments, vaccines, milestones, medications, symptoms
- parent_health_service.py : self-care goals, recovery checklist, daily mood
- vaccine_schedule.py      : standard vaccination calendar
- milestone_schedule.py    : standard first-year milestones
- seed.py                  : reference data (providers, medications)
- api_main.py, routes_*.py : FastAPI application
- client.py                : API client, live-data poller, local persistence
- cli.py                   : command line
"""
