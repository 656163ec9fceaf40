# constants/status.py
from fastapi import status

STATUS = {
    "SUCCESS": "success",
    "ERROR": "error",
}

ROLES = {
    "PATIENT": "patient",
    "ADMIN": "admin",
}

APPOINTMENT_STATUS = {
    "SCHEDULED": "scheduled",
    "CONFIRMED": "confirmed",
    "COMPLETED": "completed",
    "CANCELLED": "cancelled",
    "NO_SHOW": "no_show",
}

ACTIVE_STATUSES = [APPOINTMENT_STATUS["SCHEDULED"], APPOINTMENT_STATUS["CONFIRMED"]]

# allowed admin status changes; anything missing is final
STATUS_TRANSITIONS = {
    "scheduled": {"confirmed", "completed", "cancelled", "no_show"},
    "confirmed": {"completed", "cancelled", "no_show"},
}

ERRORS = {
    # ------- Auth -------
    "INVALID_CREDENTIALS": {
        "status_code": status.HTTP_401_UNAUTHORIZED,
        "detail": "Incorrect email or password",
        "headers": {"WWW-Authenticate": "Bearer"},
    },
    "EMAIL_TAKEN": {"status_code": status.HTTP_409_CONFLICT, "detail": "User already exists"},
    "WRONG_PASSWORD": {"status_code": status.HTTP_400_BAD_REQUEST, "detail": "Current password is incorrect"},
    "NOT_ENOUGH_PERMISSIONS": {"status_code": status.HTTP_403_FORBIDDEN, "detail": "Not enough permissions"},
    "USER_NOT_FOUND": {"status_code": status.HTTP_404_NOT_FOUND, "detail": "User not found"},
    "CANNOT_DELETE_SELF": {"status_code": status.HTTP_400_BAD_REQUEST, "detail": "Admins cannot delete their own account"},

    # ------- Appointments -------
    "APPOINTMENT_EXISTS": {
        "status_code": status.HTTP_409_CONFLICT,
        "detail": "Appointment already exists for this time (same patient or same doctor). Please choose another time.",
    },
    "APPOINTMENT_CREATE_FAILED": {"status_code": status.HTTP_500_INTERNAL_SERVER_ERROR, "detail": "Failed to create appointment"},
    "APPOINTMENT_NOT_FOUND": {"status_code": status.HTTP_404_NOT_FOUND, "detail": "Appointment not found"},
    "APPOINTMENT_NOT_ACTIVE": {"status_code": status.HTTP_409_CONFLICT, "detail": "Appointment is no longer active"},
    "NO_FIELDS_TO_UPDATE": {"status_code": status.HTTP_400_BAD_REQUEST, "detail": "No fields provided for update"},

    # ------- Doctors -------
    "DOCTOR_NOT_FOUND": {"status_code": status.HTTP_404_NOT_FOUND, "detail": "Doctor not found"},
    "DOCTOR_CREATE_FAILED": {"status_code": status.HTTP_500_INTERNAL_SERVER_ERROR, "detail": "Failed to create doctor"},
}
