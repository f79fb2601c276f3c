from attendflow.eligibility.network import client_ip, is_authorized


def test_first_hop_of_forwarded_chain_wins():
    assert client_ip("203.0.113.7, 10.0.0.1, 10.0.0.2", "10.0.0.2") == "203.0.113.7"


def test_falls_back_to_remote_addr():
    assert client_ip(None, " 192.168.1.20 ") == "192.168.1.20"
    assert client_ip("", "192.168.1.20") == "192.168.1.20"


def test_exact_match_only():
    allowed = frozenset({"192.168.1.20"})

    assert is_authorized("192.168.1.20", allowed) is True
    assert is_authorized(" 192.168.1.20 ", allowed) is True
    assert is_authorized("192.168.1.2", allowed) is False
    assert is_authorized("", allowed) is False


def test_forwarded_chain_is_reduced_to_client_address():
    allowed = frozenset({"10.0.0.5"})

    assert is_authorized("10.0.0.5, 172.16.0.1", allowed) is True
    assert is_authorized("203.0.113.7, 10.0.0.5", allowed) is False


def test_empty_allow_list_authorizes_everyone():
    assert is_authorized("1.2.3.4", frozenset()) is True
    assert is_authorized("", frozenset()) is True
