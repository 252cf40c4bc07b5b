"""OpenTelemetry metrics for credential provisioning."""

from opentelemetry import metrics

meter = metrics.get_meter("credentials")

identities_issued_total = meter.create_counter(
    name="credentials_identities_issued_total",
    description="Total identities generated",
    unit="1",
)

identity_issuance_failures_total = meter.create_counter(
    name="credentials_identity_issuance_failures_total",
    description="Total failed identity generations",
    unit="1",
)

identity_generation_duration = meter.create_histogram(
    name="credentials_identity_generation_duration_seconds",
    description="Identity generation duration in seconds",
    unit="s",
)

identities_loaded_total = meter.create_counter(
    name="credentials_identities_loaded_total",
    description="Total identities resolved from existing or new material",
    unit="1",
)

generation_prompts_total = meter.create_counter(
    name="credentials_generation_prompts_total",
    description="Total operator prompts for identity generation",
    unit="1",
)


class CredentialMetrics:
    """Facade for credential metrics with proper labels."""

    def record_identity_issued(self, role: str, duration_seconds: float) -> None:
        """Record a successful issuance. Labels: role=signing|tls"""
        identities_issued_total.add(1, {"role": role})
        identity_generation_duration.record(duration_seconds, {"role": role})

    def record_issuance_failed(self, role: str, step: str) -> None:
        identity_issuance_failures_total.add(1, {"role": role, "step": step})

    def record_identity_loaded(self, role: str, source: str) -> None:
        """Record a resolved identity. Labels: source=existing|generated"""
        identities_loaded_total.add(1, {"role": role, "source": source})

    def record_prompt_answered(self, role: str, answer: str) -> None:
        """Record an operator answer. Labels: answer=confirmed|declined"""
        generation_prompts_total.add(1, {"role": role, "answer": answer})


# Singleton instance
credential_metrics = CredentialMetrics()
