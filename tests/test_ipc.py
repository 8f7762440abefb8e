import json

import pytest

from tilecomp.ipc import (
    Mode,
    Output,
    Request,
    Response,
    decode_request,
    decode_response,
    encode_request,
    encode_response,
)


def sample_output():
    return Output(
        name="eDP-1",
        make="Maker",
        model="Panel",
        physical_size=(300, 200),
        modes=[Mode(1920, 1080, 60000), Mode(1280, 720, 60000)],
        current_mode=0,
    )


def test_encode_request_wire_format():
    assert encode_request(Request.OUTPUTS) == '"Outputs"'


def test_decode_request():
    assert decode_request('"Outputs"') is Request.OUTPUTS


def test_decode_request_unknown():
    with pytest.raises(ValueError):
        decode_request('"Bogus"')
    with pytest.raises(ValueError):
        decode_request("{}")


def test_mode_round_trip():
    mode = Mode(2560, 1600, 165004)
    assert Mode.from_dict(mode.to_dict()) == mode


def test_mode_rejects_out_of_range():
    with pytest.raises(ValueError):
        Mode.from_dict({"width": 70000, "height": 10, "refresh_rate": 1})
    with pytest.raises(ValueError):
        Mode.from_dict({"width": -1, "height": 10, "refresh_rate": 1})
    with pytest.raises(ValueError):
        Mode.from_dict({"width": True, "height": 10, "refresh_rate": 1})


def test_output_round_trip():
    output = sample_output()
    assert Output.from_dict(output.to_dict()) == output


def test_output_disabled_round_trip():
    output = Output("HDMI-A-1", "Maker", "Screen")
    assert Output.from_dict(output.to_dict()) == output


def test_output_missing_field():
    data = sample_output().to_dict()
    del data["model"]
    with pytest.raises(ValueError):
        Output.from_dict(data)


def test_output_bad_physical_size():
    data = sample_output().to_dict()
    data["physical_size"] = [1, 2, 3]
    with pytest.raises(ValueError):
        Output.from_dict(data)


def test_response_round_trip():
    response = Response({"eDP-1": sample_output()})
    assert decode_response(encode_response(response)) == response


def test_response_json_shape():
    response = Response({"eDP-1": sample_output()})
    data = json.loads(encode_response(response))
    assert list(data) == ["Outputs"]
    assert data["Outputs"]["eDP-1"]["physical_size"] == [300, 200]
    assert data["Outputs"]["eDP-1"]["current_mode"] == 0


def test_decode_response_unknown_variant():
    with pytest.raises(ValueError):
        decode_response('{"Windows": {}}')
    with pytest.raises(ValueError):
        decode_response('"Outputs"')