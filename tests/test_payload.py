import random

from graffiti.grid import GridPoint, Pixel, PixelSet, generate_pixel_set
from graffiti.payload import encode

CANVAS = "0x5d45bb2a6f391440ba10444c7734559bd5ef9053930e3ef53d05be332518522b"
DRAW = "0x915efe6647e0440f927d46e39bcb5eb040a7e567e1756e002073bc6e26f2cd23::canvas_token::draw"


def test_encode_keeps_point_order():
    ps = PixelSet(pixels=[
        Pixel(GridPoint(1, 2), 3),
        Pixel(GridPoint(4, 5), 0),
        Pixel(GridPoint(7, 8), 7),
    ])

    payload = encode(ps, CANVAS)

    assert payload.resource_id == CANVAS
    assert payload.xs == [1, 4, 7]
    assert payload.ys == [2, 5, 8]
    assert payload.colors == [3, 0, 7]


def test_encode_parity():
    for n in (1, 9, 64, 250):
        ps = generate_pixel_set(n, rng=random.Random(n))
        payload = encode(ps, CANVAS)
        assert len(payload.xs) == len(payload.ys) == len(payload.colors) == len(ps) == len(payload)


def test_entry_function_shape():
    ps = PixelSet(pixels=[Pixel(GridPoint(10, 20), 5)])
    body = encode(ps, CANVAS).entry_function(DRAW)

    assert body == {
        "type": "entry_function_payload",
        "function": DRAW,
        "type_arguments": [],
        "arguments": [CANVAS, [10], [20], [5]],
    }
