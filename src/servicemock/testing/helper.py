"""
unittest integration.

Mix ``ServiceMockHelper`` into a ``unittest.TestCase`` to get a fresh
``ServiceMocker`` per test:

    class MailerTest(ServiceMockHelper, unittest.TestCase):
        def test_sends(self):
            mailer = self.create_real_mocked_service_instance(Mailer)
            mailer.send("hi")
            self.get_mocked_service(Transport).deliver.assert_called_once()
"""

from typing import Any, Iterable, Mapping

from servicemock.assembler.orchestrator import ServiceMocker
from servicemock.config.loader import load_config
from servicemock.config.models import ServiceMockConfig


class ServiceMockHelper:
    """Per-test service mocking for TestCase subclasses."""

    service_mock_config: ServiceMockConfig | None = None

    def setUp(self):
        super().setUp()
        self._service_mocker = self._create_service_mocker()

    def _create_service_mocker(self) -> ServiceMocker:
        return ServiceMocker(self.service_mock_config or load_config())

    @property
    def service_mocker(self) -> ServiceMocker:
        if getattr(self, "_service_mocker", None) is None:
            self._service_mocker = self._create_service_mocker()
        return self._service_mocker

    def create_real_mocked_service_instance(
        self,
        cls: type | str,
        constructor: Mapping[str, Any] | None = None,
        required: Mapping[str, Any] | None = None,
    ) -> Any:
        return self.service_mocker.create_instance(cls, constructor, required)

    def create_real_partial_mocked_service_instance(
        self,
        cls: type | str,
        methods: Iterable[str],
        constructor: Mapping[str, Any] | None = None,
        required: Mapping[str, Any] | None = None,
    ) -> Any:
        return self.service_mocker.create_partial_instance(cls, methods, constructor, required)

    def get_mocked_service(self, mocked_type: type | str, service: type | str | None = None) -> Any:
        return self.service_mocker.get_mock_for(mocked_type, service)
