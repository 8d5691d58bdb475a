import time

import pytest

from bedrockping.errors import QueryTimeout
from bedrockping.transport.udp import BedrockClient, query
from bedrockping.utils.retry import RetryPolicy

@pytest.mark.system
def test_resend_recovers_from_lost_pings(sim_api, sim_endpoint):
    # first two pings are lost; the resender's third one gets through
    sim_api.set_faults(drop_first=2)

    resp = query(sim_endpoint, timeout_s=3.0, resend_s=0.05)

    assert resp.game_id == "MCPE"
    status = sim_api.status()
    assert status["pings_dropped"] == 2
    assert status["pings_received"] >= 3
    assert status["pongs_sent"] >= 1

@pytest.mark.system
def test_no_pings_after_successful_query(sim_api, sim_endpoint):
    sim_api.set_faults(drop_first=1)
    query(sim_endpoint, timeout_s=3.0, resend_s=0.05)

    time.sleep(0.1)
    received = sim_api.status()["pings_received"]
    time.sleep(0.3)
    assert sim_api.status()["pings_received"] == received

@pytest.mark.system
def test_single_ping_is_lost_without_resend(sim_api, sim_endpoint):
    sim_api.set_faults(drop_first=1)

    with pytest.raises(QueryTimeout):
        query(sim_endpoint, timeout_s=0.5)
    assert sim_api.status()["pings_received"] == 1

@pytest.mark.system
def test_resend_stops_at_deadline(sim_api, sim_endpoint):
    sim_api.set_faults(drop_rate=1.0)

    started = time.monotonic()
    with pytest.raises(QueryTimeout):
        query(sim_endpoint, timeout_s=0.4, resend_s=0.1)
    assert time.monotonic() - started < 2.0

    time.sleep(0.1)
    received = sim_api.status()["pings_received"]
    assert 2 <= received <= 6
    time.sleep(0.3)
    assert sim_api.status()["pings_received"] == received
    assert sim_api.status()["pongs_sent"] == 0

@pytest.mark.system
def test_reply_slower_than_timeout(sim_api, sim_endpoint):
    sim_api.set_faults(delay_ms=800)
    with pytest.raises(QueryTimeout):
        query(sim_endpoint, timeout_s=0.2)

@pytest.mark.system
def test_retry_policy_repeats_whole_query(sim_api, sim_endpoint):
    sim_api.set_faults(drop_first=1)
    client = BedrockClient(sim_endpoint, timeout_s=0.3)

    resp = client.request(policy=RetryPolicy(attempts=3, base_delay_s=0.01, max_delay_s=0.05))

    assert resp.game_id == "MCPE"
    assert sim_api.status()["pings_received"] == 2
