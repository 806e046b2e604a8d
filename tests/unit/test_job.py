"""
Unit tests for job identity, status records and options.
"""

import base64

import pytest
from pydantic import ValidationError

from goq.config import Settings
from goq.types.job import Job, Status, job_id_for
from goq.types.options import BackoffPolicy, ConnectionOptions, QueueOptions


class TestJobId:
    """Tests for job_id_for."""

    def test_same_payload_same_id(self):
        payload = '{"task":"resize"}'

        assert job_id_for(payload) == job_id_for(payload)

    def test_distinct_payloads_distinct_ids(self):
        ids = {job_id_for(p) for p in ['{"a":1}', '{"a":2}', '{"a": 1}', "", "x"]}

        assert len(ids) == 5

    def test_id_is_base32_of_payload_bytes(self):
        payload = '{"task":"resize","size":"héllo"}'

        job_id = job_id_for(payload)

        assert base64.b32decode(job_id) == payload.encode("utf-8")

    def test_str_and_bytes_agree(self):
        assert job_id_for("payload") == job_id_for(b"payload")

    def test_known_value(self):
        assert job_id_for("f") == "MY======"
        assert job_id_for("foobar") == "MZXW6YTBOI======"


class TestStatus:
    """Tests for the Status model and its wire format."""

    def test_defaults(self):
        status = Status()

        assert status.code == 0
        assert status.progress == 0

    def test_to_json_uses_capitalized_keys(self):
        assert Status(code=1, progress=100).to_json() == '{"Code":1,"Progress":100}'

    def test_from_json(self):
        status = Status.from_json('{"Code": 3, "Progress": 42}')

        assert status == Status(code=3, progress=42)

    def test_from_json_missing_fields_default_to_zero(self):
        assert Status.from_json('{"Code": 7}') == Status(code=7, progress=0)

    def test_from_json_rejects_invalid_json(self):
        with pytest.raises(ValidationError):
            Status.from_json("not json")

    def test_from_json_rejects_string_numbers(self):
        with pytest.raises(ValidationError):
            Status.from_json('{"Code": "1", "Progress": 0}')

    @pytest.mark.parametrize("code,progress", [(-1, 0), (256, 0), (0, 256), (0, -5)])
    def test_out_of_byte_range_rejected(self, code: int, progress: int):
        with pytest.raises(ValidationError):
            Status(code=code, progress=progress)

    def test_byte_bounds_accepted(self):
        status = Status(code=255, progress=255)

        assert status.to_json() == '{"Code":255,"Progress":255}'


class TestJobStatusMethods:
    """Tests for Job.set_status and Job.get_status."""

    async def test_set_then_get_round_trip(self, store):
        job = Job(id=job_id_for("p"), payload="p", status=Status(), store=store)

        await job.set_status(4, 80)
        job.status = Status()
        loaded = await job.get_status()

        assert loaded == Status(code=4, progress=80)
        assert job.status == Status(code=4, progress=80)

    async def test_set_status_out_of_range_leaves_status_untouched(self, store, redis_client):
        job = Job(id="ID", payload="p", status=Status(code=1, progress=2), store=store)

        with pytest.raises(ValidationError):
            await job.set_status(300, 0)

        assert job.status == Status(code=1, progress=2)
        assert await redis_client.get(store.key_for("ID")) is None


class TestBackoffPolicy:
    """Tests for the dispatcher backoff schedule."""

    def test_exponential_growth_capped(self):
        policy = BackoffPolicy(
            initial_delay=0.5, max_delay=3.0, multiplier=2.0, failure_threshold=0
        )

        delays = [policy.delay_for(n) for n in range(0, 6)]

        assert delays == [0.0, 0.5, 1.0, 2.0, 3.0, 3.0]

    def test_circuit_opens_at_threshold(self):
        policy = BackoffPolicy(
            initial_delay=0.1, max_delay=1.0, failure_threshold=3, cooldown=30.0
        )

        assert policy.is_open(2) is False
        assert policy.is_open(3) is True
        assert policy.delay_for(3) == 30.0
        assert policy.delay_for(10) == 30.0

    def test_zero_threshold_disables_circuit(self):
        policy = BackoffPolicy(failure_threshold=0)

        assert policy.is_open(1000) is False


class TestOptions:
    """Tests for option construction."""

    def test_addr_parsing(self):
        options = ConnectionOptions(addr="redis.internal:6380")

        assert options.host == "redis.internal"
        assert options.port == 6380

    def test_addr_without_port(self):
        options = ConnectionOptions(addr="redis.internal")

        assert options.host == "redis.internal"
        assert options.port == 6379

    def test_queue_options_from_settings(self):
        settings = Settings(
            redis_addr="cache:7000",
            redis_db=3,
            queue_name="images",
            queue_concurrency=8,
            queue_buffer_size=50,
            dispatcher_failure_threshold=4,
        )

        options = QueueOptions.from_settings(
            settings, processor=lambda job: None, error_handler=lambda err: None
        )

        assert options.connection.addr == "cache:7000"
        assert options.connection.db == 3
        assert options.queue_name == "images"
        assert options.concurrency == 8
        assert options.buffer_size == 50
        assert options.pop_timeout == 0
        assert options.backoff.failure_threshold == 4

    def test_queue_options_are_frozen(self):
        options = QueueOptions(
            connection=ConnectionOptions(),
            concurrency=1,
            queue_name="q",
            processor=lambda job: None,
            error_handler=lambda err: None,
        )

        with pytest.raises(AttributeError):
            options.concurrency = 2  # type: ignore[misc]

    @pytest.mark.parametrize("addr", ["redis.internal:", "redis.internal:port", "redis.internal:70000"])
    def test_invalid_port_rejected(self, addr: str):
        with pytest.raises(ValidationError):
            ConnectionOptions(addr=addr)

    @pytest.mark.parametrize("concurrency", [-1, 256])
    def test_concurrency_out_of_range_rejected(self, concurrency: int):
        with pytest.raises(ValueError, match="concurrency"):
            QueueOptions(
                connection=ConnectionOptions(),
                concurrency=concurrency,
                queue_name="q",
                processor=lambda job: None,
                error_handler=lambda err: None,
            )

    def test_concurrency_bounds_accepted(self):
        for concurrency in (0, 255):
            options = QueueOptions(
                connection=ConnectionOptions(),
                concurrency=concurrency,
                queue_name="q",
                processor=lambda job: None,
                error_handler=lambda err: None,
            )
            assert options.concurrency == concurrency

    def test_empty_buffer_rejected(self):
        with pytest.raises(ValueError, match="buffer_size"):
            QueueOptions(
                connection=ConnectionOptions(),
                concurrency=1,
                queue_name="q",
                processor=lambda job: None,
                error_handler=lambda err: None,
                buffer_size=0,
            )
