"""Python client for the MediBook REST API.

Keeps the bearer token in a ``TokenStore`` so a session survives restarts,
attaches it to every request and forgets it as soon as the server answers 401.
"""
import logging
import os
from typing import Optional

import requests

from client.token_store import TokenStore

logger = logging.getLogger(__name__)

BASE_URL = os.getenv("MEDIBOOK_API_URL", "http://localhost:8000")
TIMEOUT = 15


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class AuthenticationRequired(ApiError):
    pass


class ApiConnectionError(ApiError):
    def __init__(self, message: str = "No response from server. Please check your connection."):
        super().__init__(0, message)


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or "An error occurred"
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("message")
        if isinstance(detail, list):
            # FastAPI validation errors
            return "; ".join(item.get("msg", str(item)) for item in detail)
        if detail:
            return str(detail)
    return "An error occurred"


class MediBookClient:
    def __init__(self, base_url: str = BASE_URL, store: TokenStore = None, session: requests.Session = None):
        self.base_url = base_url.rstrip("/")
        self.store = store or TokenStore()
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    # ---------- plumbing ----------
    def _request(self, method: str, path: str, **kwargs):
        headers = kwargs.pop("headers", {})
        token = self.store.token
        if token:
            headers["Authorization"] = f"Bearer {token}"

        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, headers=headers, timeout=TIMEOUT, **kwargs)
        except (requests.ConnectionError, requests.Timeout) as e:
            logger.error("Request to %s failed: %s", url, e)
            raise ApiConnectionError()

        if response.status_code == 401:
            self.store.clear()
            raise AuthenticationRequired(401, _error_message(response))
        if response.status_code >= 400:
            message = _error_message(response)
            logger.warning("%s %s -> %s %s", method, path, response.status_code, message)
            raise ApiError(response.status_code, message)

        if not response.content:
            return None
        return response.json()

    def _get(self, path: str, params: dict = None):
        if params:
            params = {k: v for k, v in params.items() if v not in (None, "")}
        return self._request("GET", path, params=params)

    def _post(self, path: str, payload: dict = None):
        return self._request("POST", path, json=payload)

    def _put(self, path: str, payload: dict = None):
        return self._request("PUT", path, json=payload)

    def _delete(self, path: str):
        return self._request("DELETE", path)

    # ---------- auth ----------
    @property
    def is_authenticated(self) -> bool:
        return bool(self.store.user)

    @property
    def current_user(self) -> Optional[dict]:
        return self.store.user

    def _remember(self, data: dict) -> dict:
        self.store.save(data["access_token"], data["user"])
        return data

    def login(self, email: str, password: str) -> dict:
        return self._remember(self._post("/auth/login", {"email": email, "password": password}))

    def register(self, name: str, email: str, password: str) -> dict:
        return self._remember(self._post("/auth/register", {"name": name, "email": email, "password": password}))

    def logout(self) -> None:
        try:
            if self.store.token:
                self._post("/auth/logout")
        except AuthenticationRequired:
            logger.info("Session had already expired")
        finally:
            self.store.clear()

    def get_profile(self) -> dict:
        return self._get("/auth/me")

    def update_profile(self, **fields) -> dict:
        user = self._put("/auth/me", fields)
        self.store.update_user(user)
        return user

    def change_password(self, current_password: str, new_password: str) -> dict:
        return self._put("/auth/change-password", {
            "current_password": current_password,
            "new_password": new_password,
        })

    # ---------- doctors ----------
    def list_doctors(self, **filters) -> dict:
        return self._get("/doctors", filters)

    def get_doctor(self, doctor_id: str) -> dict:
        return self._get(f"/doctors/{doctor_id}")

    def get_specialties(self) -> list:
        return self._get("/doctors/specialties")

    def get_doctor_availability(self, doctor_id: str) -> dict:
        return self._get(f"/doctors/{doctor_id}/availability")

    def toggle_favorite(self, doctor_id: str) -> dict:
        return self._post(f"/doctors/{doctor_id}/favorite")

    # ---------- appointments ----------
    def list_appointments(self, scope: str = "all") -> dict:
        return self._get("/appointments", {"scope": scope})

    def get_appointment(self, appointment_id: str) -> dict:
        return self._get(f"/appointments/{appointment_id}")

    def book_appointment(self, doctor_id: str, date_time: str, reason: str = None, notes: str = None) -> dict:
        return self._post("/appointments", {
            "doctor_id": doctor_id,
            "date_time": date_time,
            "reason": reason,
            "notes": notes,
        })

    def update_appointment(self, appointment_id: str, **fields) -> dict:
        return self._put(f"/appointments/{appointment_id}", fields)

    def delete_appointment(self, appointment_id: str) -> dict:
        return self._delete(f"/appointments/{appointment_id}")

    def cancel_appointment(self, appointment_id: str) -> dict:
        return self._post(f"/appointments/{appointment_id}/cancel")

    def reschedule_appointment(self, appointment_id: str, new_date_time: str) -> dict:
        return self._post(f"/appointments/{appointment_id}/reschedule", {"new_date_time": new_date_time})

    def get_available_slots(self, doctor_id: str, date: str) -> dict:
        return self._get(f"/appointments/available-slots/{doctor_id}", {"date": date})

    # ---------- patients ----------
    def get_patient_profile(self) -> dict:
        return self._get("/patients/me")

    def update_patient_profile(self, **fields) -> dict:
        return self._put("/patients/me", fields)

    def get_dashboard(self) -> dict:
        return self._get("/patients/me/dashboard")

    def get_medical_history(self) -> list:
        return self._get("/patients/me/medical-history")

    def get_prescriptions(self) -> list:
        return self._get("/patients/me/prescriptions")

    def get_test_results(self) -> list:
        return self._get("/patients/me/test-results")

    # ---------- admin ----------
    def admin_list_users(self, **params) -> dict:
        return self._get("/admin/users", params)

    def admin_get_user(self, user_id: str) -> dict:
        return self._get(f"/admin/users/{user_id}")

    def admin_create_user(self, **fields) -> dict:
        return self._post("/admin/users", fields)

    def admin_update_user(self, user_id: str, **fields) -> dict:
        return self._put(f"/admin/users/{user_id}", fields)

    def admin_delete_user(self, user_id: str) -> dict:
        return self._delete(f"/admin/users/{user_id}")

    def admin_list_appointments(self, **params) -> list:
        return self._get("/admin/appointments", params)

    def admin_update_appointment_status(self, appointment_id: str, status: str) -> dict:
        return self._put(f"/admin/appointments/{appointment_id}/status", {"status": status})

    def admin_appointment_stats(self) -> dict:
        return self._get("/admin/reports/appointment-stats")

    def admin_revenue_report(self, start: str = None, end: str = None) -> dict:
        return self._get("/admin/reports/revenue", {"start": start, "end": end})
