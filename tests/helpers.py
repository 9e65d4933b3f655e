from unittest.mock import Mock

# Minter docs example key; any scalar below the curve order works
TEST_PRIV_HEX = "07bc17abdcee8b971bb8723e36fe9d2523306d5ab2d683631693238e0f9df142"
TEST_PAYER = "Mx31e61a05adbd13c6b625262704bc305bf7725026"

KEY_A = "Mp" + "aa" * 32
KEY_B = "Mp" + "bb" * 32
KEY_C = "Mp" + "0123456789abcdef" * 4


def make_entry(pub_key, status=2, total_stake="1000000000000000000", stakes=None,
               commission=10, reward="0", absent_times=0):
    """One element of /api/validators `result`."""
    return {
        "accumulated_reward": reward,
        "absent_times": absent_times,
        "candidate": {
            "candidate_address": "Mx" + "11" * 20,
            "total_stake": total_stake,
            "pub_key": pub_key,
            "commission": commission,
            "created_at_block": 12,
            "status": status,
            "stakes": stakes if stakes is not None else [],
        },
    }


def json_response(body, status_code=200):
    resp = Mock(status_code=status_code)
    resp.json.return_value = body
    return resp


def broken_response(status_code=502):
    resp = Mock(status_code=status_code)
    resp.json.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")
    return resp
