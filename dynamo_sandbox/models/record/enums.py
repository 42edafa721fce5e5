class WriteOutcome:
    CREATED = 'CREATED'
    CONDITION_FAILED = 'CONDITION_FAILED'
