"""
Use Cases Layer (Business Operations)

Structure
---------
usecases/
├── lottery/     # Scheduled and manual draws
└── volunteer/   # Activities, registrations and participation stats

Import from subpackages:

    from spaced_api.application.usecases.lottery import RunScheduledLotteryUseCase
    from spaced_api.application.usecases.volunteer import RegisterForActivityUseCase
"""
