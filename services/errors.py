# services/errors.py


class ServiceError(ValueError):
    """ข้อมูลไม่ถูกต้อง -> HTTP 400"""


class NotFoundError(ServiceError):
    """ไม่พบข้อมูลใน tenant นี้ -> HTTP 404"""


class ConflictError(ServiceError):
    """ข้อมูลซ้ำ -> HTTP 409"""


class WorkStepMismatchError(ServiceError):
    def __init__(self, sub_job_step_id, team_step_ids):
        self.sub_job_step_id = sub_job_step_id
        self.team_step_ids = list(team_step_ids)
        super().__init__(
            f"Work step mismatch: sub job step {sub_job_step_id} "
            f"is not one of the team's department steps {self.team_step_ids}"
        )
