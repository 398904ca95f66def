from __future__ import annotations

import ipaddress
import socket
from typing import Any, Iterable
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

import requests
import structlog

from cmsblog.cms.errors import BlockedURLError, CMSError
from cmsblog.cms.predicates import at, build_query

log = structlog.get_logger(__name__)


class PrismicClient:
    """Read-only client for the Prismic REST API v2."""

    # Private IP ranges that should be blocked for SSRF protection
    PRIVATE_IP_RANGES = [
        ipaddress.ip_network('127.0.0.0/8'),      # Loopback
        ipaddress.ip_network('10.0.0.0/8'),       # Private network
        ipaddress.ip_network('172.16.0.0/12'),    # Private network
        ipaddress.ip_network('192.168.0.0/16'),   # Private network
        ipaddress.ip_network('169.254.0.0/16'),   # Link-local (includes metadata endpoint)
        ipaddress.ip_network('::1/128'),          # IPv6 loopback
        ipaddress.ip_network('fc00::/7'),         # IPv6 unique local
        ipaddress.ip_network('fe80::/10'),        # IPv6 link-local
    ]

    # Common cloud metadata endpoints that should be blocked
    BLOCKED_METADATA_HOSTS = [
        '169.254.169.254',  # AWS, Azure, GCP metadata
        'metadata.google.internal',  # GCP metadata
        'metadata.azure.com',  # Azure metadata
    ]

    def __init__(
        self,
        api_endpoint: str,
        access_token: str | None = None,
        allowed_domains: Iterable[str] | None = None,
        timeout: float = 10,
        block_private_networks: bool = True,
    ):
        """Initialize the client.

        Args:
            api_endpoint (str): Repository API root, e.g. ``https://repo.cdn.prismic.io/api/v2``.
            access_token (str, optional): Token for private repositories.
            allowed_domains (list, optional): Hosts accepted besides the endpoint host.
                Subdomains of every entry are accepted too.
            timeout (float): Per-request timeout in seconds.
            block_private_networks (bool): Reject hosts resolving to private ranges.
        """
        if not api_endpoint.startswith(('http://', 'https://')):
            api_endpoint = f'https://{api_endpoint}'
        self.api_endpoint = api_endpoint.rstrip('/')
        self.access_token = access_token
        self.timeout = timeout
        self.block_private_networks = block_private_networks

        endpoint_host = urlparse(self.api_endpoint).hostname
        if not endpoint_host:
            raise ValueError(f"Invalid API endpoint '{api_endpoint}'")
        self.allowed_domains = [endpoint_host, *(allowed_domains or [])]

    @property
    def search_url(self) -> str:
        return f"{self.api_endpoint}/documents/search"

    def _is_private_ip(self, ip_str):
        """Check if an IP address is in a private/restricted range."""
        try:
            ip = ipaddress.ip_address(ip_str)
            return any(ip in network for network in self.PRIVATE_IP_RANGES)
        except ValueError:
            # Not a valid IP address
            return False

    def _check_url_policy(self, url):
        """Check scheme and host of ``url`` against the allowlist.

        Raises:
            BlockedURLError: If URL is blocked for security reasons
        """
        parsed = urlparse(url)

        if parsed.scheme not in ('http', 'https'):
            raise BlockedURLError(f"Blocked: Invalid scheme '{parsed.scheme}'. Only HTTP/HTTPS allowed.")

        hostname = parsed.hostname
        if not hostname:
            raise BlockedURLError("Blocked: Invalid URL - no hostname found")

        hostname_lower = hostname.lower()
        if hostname_lower in [h.lower() for h in self.BLOCKED_METADATA_HOSTS]:
            raise BlockedURLError(f"Blocked: Access to metadata endpoint '{hostname}' is not allowed")

        allowed = any(
            hostname_lower == domain.lower() or
            hostname_lower.endswith('.' + domain.lower())
            for domain in self.allowed_domains
        )
        if not allowed:
            raise BlockedURLError(f"Blocked: Domain '{hostname}' is not in the allowed domains list")
        return hostname

    def _validate_url(self, url):
        """Validate URL for SSRF protection.

        Raises:
            BlockedURLError: If URL is blocked for security reasons
            CMSError: If the host cannot be resolved
        """
        hostname = self._check_url_policy(url)

        if not self.block_private_networks:
            return True

        try:
            addr_info = socket.getaddrinfo(hostname, None)
        except socket.gaierror as e:
            log.error("cms_unresolvable", host=hostname, error=str(e))
            raise CMSError(f"Content API host '{hostname}' could not be resolved: {e}") from e

        # info[4][0] contains the IP address
        for ip in {info[4][0] for info in addr_info}:
            if self._is_private_ip(ip):
                raise BlockedURLError(
                    f"Blocked: Host '{hostname}' resolves to private/restricted IP {ip}. "
                    "Access to private networks is not allowed for security reasons."
                )
        return True

    def _get(self, url: str, params: dict[str, Any] | None = None) -> dict:
        self._validate_url(url)
        params = dict(params or {})
        if self.access_token:
            params['access_token'] = self.access_token

        log.info("cms_request", url=self.public_url(url))
        try:
            resp = requests.get(url, params=params, headers={'Accept': 'application/json'}, timeout=self.timeout)
        except requests.RequestException as e:
            log.error("cms_unreachable", url=self.public_url(url), error=str(e))
            raise CMSError(f"Content API unreachable: {e}") from e

        if not resp.ok:
            log.error("cms_error_status", url=self.public_url(url), status=resp.status_code)
            raise CMSError(f"Content API answered {resp.status_code}", status_code=resp.status_code)
        try:
            return resp.json()
        except ValueError as e:
            raise CMSError("Content API returned a non-JSON body", status_code=resp.status_code) from e

    def public_url(self, url: str | None) -> str | None:
        """Drop the access token from ``url`` so it can be handed to a browser."""
        if not url:
            return url
        parsed = urlparse(url)
        query = [(k, v) for k, v in parse_qsl(parsed.query, keep_blank_values=True) if k != 'access_token']
        return urlunparse(parsed._replace(query=urlencode(query)))

    def get_api(self) -> dict:
        return self._get(self.api_endpoint)

    def master_ref(self) -> str:
        for ref in self.get_api().get('refs') or []:
            if ref.get('isMasterRef'):
                return ref['ref']
        raise CMSError("Content API did not advertise a master ref")

    def query(
        self,
        predicates: Iterable[str],
        *,
        ref: str,
        page_size: int = 20,
        page: int = 1,
        fetch: Iterable[str] | None = None,
        orderings: str | None = None,
    ) -> dict:
        params: dict[str, Any] = {
            'ref': ref,
            'q': build_query(predicates),
            'pageSize': page_size,
            'page': page,
        }
        if fetch:
            params['fetch'] = ','.join(fetch)
        if orderings:
            params['orderings'] = orderings
        return self._get(self.search_url, params)

    def get_by_uid(self, document_type: str, uid: str, *, ref: str) -> dict | None:
        response = self.query([at(f"my.{document_type}.uid", uid)], ref=ref, page_size=1)
        results = response.get('results') or []
        return results[0] if results else None

    def page_from_url(self, url: str) -> int:
        """Page number carried by a pagination link (``next_page``).

        Only the ``page`` parameter is read. Query, ref, page size and
        fetch fields are rebuilt by the caller.

        Raises:
            BlockedURLError: If the link is not a search URL of an allowed host
                or carries no usable page number
        """
        self._check_url_policy(url)
        parsed = urlparse(url)
        if not parsed.path.rstrip('/').endswith('/documents/search'):
            raise BlockedURLError(f"Blocked: '{parsed.path}' is not a search endpoint")

        raw_page = dict(parse_qsl(parsed.query)).get('page', '')
        try:
            page = int(raw_page)
        except ValueError:
            raise BlockedURLError(f"Blocked: invalid page '{raw_page}'") from None
        if page < 1:
            raise BlockedURLError(f"Blocked: invalid page '{raw_page}'")
        return page
