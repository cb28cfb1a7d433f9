"""
HTTP gateway for the Phorest third-party API
Handles URL construction, basic authentication, retries with backoff and a
per-branch circuit breaker. Knows nothing about sync semantics.
"""
import logging
import threading
import time
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from requests.auth import HTTPBasicAuth
from urllib3.util.retry import Retry

from app.error_handlers.exceptions import CircuitOpenError, ConfigurationException, PhorestAPIError
from .envelopes import extract_list


class PhorestGateway:
    """Authenticated client for the Phorest REST API"""

    USERNAME_PREFIX = 'global/'
    RETRY_STATUSES = [429, 500, 502, 503, 504]

    def __init__(self, app=None):
        self.logger = logging.getLogger(__name__)
        self.session = None
        self.base_url = ''
        self.business_id = ''
        self.username = ''
        self.password = ''
        self.timeout = 30
        self.max_retries = 3
        self.backoff_factor = 1.0
        self.breaker_threshold = 3
        self.breaker_reset_seconds = 300
        self._branch_failures: Dict[str, Dict[str, float]] = {}
        self._breaker_lock = threading.Lock()

        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        """Initialize the gateway from Flask config"""
        self.configure(
            base_url=app.config.get('PHOREST_BASE_URL', ''),
            business_id=app.config.get('PHOREST_BUSINESS_ID', ''),
            username=app.config.get('PHOREST_USERNAME', ''),
            password=app.config.get('PHOREST_API_KEY', ''),
            timeout=app.config.get('PHOREST_TIMEOUT', 30),
            max_retries=app.config.get('PHOREST_MAX_RETRIES', 3),
            backoff_factor=app.config.get('PHOREST_BACKOFF_FACTOR', 1.0),
            breaker_threshold=app.config.get('PHOREST_CIRCUIT_BREAKER_THRESHOLD', 3),
        )

    def configure(
        self,
        base_url: str,
        business_id: str,
        username: str,
        password: str,
        timeout: int = 30,
        max_retries: int = 3,
        backoff_factor: float = 1.0,
        breaker_threshold: int = 3,
    ):
        """Set connection settings and rebuild the HTTP session"""
        self.base_url = base_url or ''
        self.business_id = business_id or ''
        self.username = self.normalize_username(username)
        self.password = password or ''
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self.breaker_threshold = breaker_threshold
        self.reset_circuits()
        self._setup_session()

    @classmethod
    def normalize_username(cls, username: Optional[str]) -> str:
        """
        Phorest expects usernames in the ``global/`` namespace.

        Examples:
            >>> PhorestGateway.normalize_username('ops@salon.com')
            'global/ops@salon.com'
            >>> PhorestGateway.normalize_username('global/ops@salon.com')
            'global/ops@salon.com'
        """
        if not username:
            return ''
        if username.startswith(cls.USERNAME_PREFIX):
            return username
        return f"{cls.USERNAME_PREFIX}{username}"

    def _setup_session(self):
        """Setup requests session with retry strategy and basic auth"""
        self.session = requests.Session()

        # Only idempotent reads are retried; the last response is returned
        # once attempts run out so the status can be reported
        retry_strategy = Retry(
            total=self.max_retries,
            status_forcelist=self.RETRY_STATUSES,
            allowed_methods=["GET"],
            backoff_factor=self.backoff_factor,
            raise_on_status=False
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

        self.session.auth = HTTPBasicAuth(self.username, self.password)
        self.session.headers.update({
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": "salon-phorest-sync/1.0 (+requests)",
        })

    @property
    def is_configured(self) -> bool:
        return all([self.base_url, self.business_id, self.username, self.password])

    def build_url(self, endpoint: str) -> str:
        """Full URL for an endpoint relative to the business"""
        return f"{self.base_url.rstrip('/')}/business/{self.business_id}/{endpoint.lstrip('/')}"

    # ------------------------------------------------------------------
    # Circuit breaker
    # ------------------------------------------------------------------

    def reset_circuits(self):
        """Close every branch circuit"""
        with self._breaker_lock:
            self._branch_failures = {}

    def _check_circuit(self, branch_id: str, endpoint: str):
        with self._breaker_lock:
            state = self._branch_failures.get(branch_id)
            if not state or state['failures'] < self.breaker_threshold:
                return
            if time.monotonic() - state['opened_at'] >= self.breaker_reset_seconds:
                # Half-open: let one request through
                return
            failures = int(state['failures'])

        self.logger.warning(f"Circuit open for branch {branch_id}, skipping {endpoint}")
        raise CircuitOpenError(branch_id, failures, endpoint=endpoint)

    def _record_failure(self, branch_id: Optional[str]):
        if not branch_id:
            return
        with self._breaker_lock:
            state = self._branch_failures.setdefault(branch_id, {'failures': 0, 'opened_at': 0.0})
            state['failures'] += 1
            state['opened_at'] = time.monotonic()

    def _record_success(self, branch_id: Optional[str]):
        if not branch_id:
            return
        with self._breaker_lock:
            self._branch_failures.pop(branch_id, None)

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None, branch_id: Optional[str] = None) -> Any:
        """
        GET an endpoint and return the decoded JSON body

        Args:
            endpoint: Path relative to ``/business/{businessId}``
            params: Query string parameters
            branch_id: Branch the request is scoped to, for the circuit breaker

        Raises:
            ConfigurationException: If credentials are missing
            CircuitOpenError: If the branch circuit is open
            PhorestAPIError: On transport failure, non-2xx status or non-JSON body
        """
        if not self.is_configured:
            raise ConfigurationException('Phorest API credentials not configured', status_code=400)

        if branch_id:
            self._check_circuit(branch_id, endpoint)

        url = self.build_url(endpoint)
        started = time.monotonic()

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            self._record_failure(branch_id)
            self.logger.error(f"Request failed: GET {endpoint} - {str(e)}")
            raise PhorestAPIError(f"Phorest request failed: {str(e)}", endpoint=endpoint) from e

        elapsed_ms = int((time.monotonic() - started) * 1000)
        self.logger.info(
            "GET %s - Status: %s (%dms)", endpoint, response.status_code, elapsed_ms,
            extra={'endpoint': endpoint, 'status': response.status_code, 'elapsed_ms': elapsed_ms,
                   'branch_id': branch_id}
        )

        if not response.ok:
            body = response.text[:1000]
            self._record_failure(branch_id)
            self.logger.error(f"Phorest API error ({response.status_code}): {body[:300]}")
            raise PhorestAPIError(
                f"Phorest API error: {response.status_code} - {body}",
                api_status_code=response.status_code,
                response_body=body,
                endpoint=endpoint
            )

        try:
            payload = response.json()
        except ValueError:
            self._record_failure(branch_id)
            self.logger.warning("Non-JSON response from %s: %s", endpoint, response.text[:300])
            raise PhorestAPIError(
                'Phorest returned a non-JSON response',
                api_status_code=response.status_code,
                response_body=response.text[:1000],
                endpoint=endpoint
            )

        self._record_success(branch_id)
        return payload

    def _format_date(self, value) -> str:
        """Format date for Phorest query strings (YYYY-MM-DD)"""
        if isinstance(value, (date, datetime)):
            return value.strftime('%Y-%m-%d')
        return str(value)

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    def list_branches(self) -> List[Dict]:
        return extract_list(self.get('/branch'), 'branches')

    def list_branch_staff(self, branch_id: str) -> List[Dict]:
        payload = self.get(f'/branch/{branch_id}/staff', branch_id=branch_id)
        return extract_list(payload, 'staffs', 'staff')

    def list_appointments(self, date_from, date_to) -> List[Dict]:
        payload = self.get('/appointment', params={
            'startDate': self._format_date(date_from),
            'endDate': self._format_date(date_to),
        })
        return extract_list(payload, 'appointments')

    def list_branch_clients(self, branch_id: str, size: int = 500) -> List[Dict]:
        payload = self.get(f'/branch/{branch_id}/client', params={'size': size}, branch_id=branch_id)
        return extract_list(payload, 'clients')

    def list_clients(self, size: int = 500) -> List[Dict]:
        """Business-wide client listing, used when branch scoped listing yields nothing"""
        return extract_list(self.get('/client', params={'size': size}), 'clients')

    def staff_performance_report(self, start_date, end_date) -> List[Dict]:
        payload = self.get('/report/staff-performance', params={
            'startDate': self._format_date(start_date),
            'endDate': self._format_date(end_date),
        })
        return extract_list(payload, 'staffPerformance')

    def list_branch_purchases(self, branch_id: str, date_from, date_to) -> List[Dict]:
        payload = self.get(f'/branch/{branch_id}/purchase', params={
            'startDate': self._format_date(date_from),
            'endDate': self._format_date(date_to),
        }, branch_id=branch_id)
        return extract_list(payload, 'purchases', 'transactions')

    def check_connection(self) -> Dict:
        """Check credentials by listing branches"""
        if not self.is_configured:
            return {'connected': False, 'error': 'Phorest API credentials not configured'}

        try:
            branches = self.list_branches()
        except PhorestAPIError as e:
            return {'connected': False, 'error': e.message}

        return {
            'connected': True,
            'business_id': self.business_id,
            'branch_count': len(branches),
            'branch_list': [
                {'id': b.get('branchId') or b.get('id'), 'name': b.get('name')}
                for b in branches
            ],
        }


# Global gateway instance, bound in create_app()
phorest_gateway = PhorestGateway()
