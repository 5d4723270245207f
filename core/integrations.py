"""HTTP client for the MyHome backend API."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from core.exceptions import ApiError, NetworkError
from core.state import SessionStore
from myhome.models import (
    CreateSimulationRequest,
    Customer,
    EligibilitySnapshot,
    FinancialInstitution,
    InstitutionRate,
    LoanProgram,
    LoanSimulation,
    Property,
    RateRange,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class ApiClient:
    """Thin JSON-over-HTTP wrapper: one base URL, bearer auth, uniform errors."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
        store: Optional[SessionStore] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.store = store

    def build_url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self.store.get_token() if self.store else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        url = self.build_url(path)
        query = {k: str(v) for k, v in (params or {}).items() if v is not None}
        logger.debug("%s %s %s", method, url, query)
        try:
            response = self.session.request(
                method,
                url,
                params=query or None,
                json=json,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise NetworkError(f"No se pudo conectar con el servidor: {exc}") from exc

        data = None
        if response.text:
            try:
                data = response.json()
            except ValueError as exc:
                if response.ok:
                    raise ApiError(response.status_code, "Respuesta inválida del servidor") from exc

        if not response.ok:
            if isinstance(data, dict) and data.get("message") is not None:
                message = str(data["message"])
            else:
                message = f"Error en la solicitud ({response.status_code})"
            logger.warning("%s %s -> %s: %s", method, url, response.status_code, message)
            raise ApiError(response.status_code, message)
        return data

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, params: Optional[Dict[str, Any]] = None, json: Any = None) -> Any:
        return self.request("POST", path, params=params, json=json)

    def patch(self, path: str, params: Optional[Dict[str, Any]] = None, json: Any = None) -> Any:
        return self.request("PATCH", path, params=params, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)


def _parse(model: Type[M], data: Any) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        logger.warning("Unexpected %s payload: %s", model.__name__, exc)
        raise ApiError(None, f"Respuesta inesperada del servidor ({model.__name__})") from exc


def _parse_list(model: Type[M], data: Any) -> List[M]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise ApiError(None, f"Respuesta inesperada del servidor ({model.__name__})")
    return [_parse(model, item) for item in data]


class BackendGateway:
    """Typed operations over the backend endpoints the wizard relies on."""

    def __init__(self, client: ApiClient):
        self.client = client

    @classmethod
    def from_settings(cls, settings, store: Optional[SessionStore] = None) -> "BackendGateway":
        return cls(ApiClient(settings.API_BASE_URL, timeout=settings.REQUEST_TIMEOUT, store=store))

    # catalogs
    def get_customers(self) -> List[Customer]:
        return _parse_list(Customer, self.client.get("/customers"))

    def get_customer_by_id(self, customer_id: str) -> Customer:
        return _parse(Customer, self.client.get(f"/customers/{customer_id}"))

    def get_properties(self) -> List[Property]:
        return _parse_list(Property, self.client.get("/properties"))

    def get_property_by_id(self, property_id: str) -> Property:
        return _parse(Property, self.client.get(f"/properties/{property_id}"))

    def get_loan_programs(self) -> List[LoanProgram]:
        return _parse_list(LoanProgram, self.client.get("/loan-programs"))

    def get_institutions(self) -> List[FinancialInstitution]:
        return _parse_list(FinancialInstitution, self.client.get("/institutions"))

    # rates
    def get_rate_range(self, program_id: str) -> RateRange:
        data = self.client.get("/institutions/rates/range", params={"loanProgramId": program_id})
        return _parse(RateRange, data)

    def search_institutions_offering_rate(self, program_id: str, rate: Decimal) -> List[InstitutionRate]:
        data = self.client.get(
            "/institutions/rates/search",
            params={"loanProgramId": program_id, "rate": rate},
        )
        return _parse_list(InstitutionRate, data)

    def get_institution_rate(self, institution_id: str, program_id: str) -> InstitutionRate:
        data = self.client.get(f"/institutions/{institution_id}/rates", params={"loanProgramId": program_id})
        return _parse(InstitutionRate, data)

    # eligibility
    def validate_eligibility_with_property(self, customer_id: str, property_id: str) -> EligibilitySnapshot:
        data = self.client.post(
            "/loan-programs/eligibility/validate-with-property",
            params={"customerId": customer_id, "propertyId": property_id},
        )
        snapshot = _parse(EligibilitySnapshot, data)
        return snapshot.model_copy(
            update={
                "customer_id": snapshot.customer_id or customer_id,
                "property_id": snapshot.property_id or property_id,
            }
        )

    # simulations
    def create_simulation(self, request: CreateSimulationRequest) -> LoanSimulation:
        return _parse(LoanSimulation, self.client.post("/simulations", json=request.to_payload()))

    def get_simulations(self) -> List[LoanSimulation]:
        return _parse_list(LoanSimulation, self.client.get("/simulations"))

    def get_simulation(self, simulation_id: str) -> LoanSimulation:
        return _parse(LoanSimulation, self.client.get(f"/simulations/{simulation_id}"))

    def delete_simulation(self, simulation_id: str) -> None:
        self.client.delete(f"/simulations/{simulation_id}")

    def save_simulation(self, simulation_id: str) -> Optional[LoanSimulation]:
        data = self.client.patch(f"/simulations/{simulation_id}/save")
        return _parse(LoanSimulation, data) if data else None
