import numpy as np
import pytest

from src.core.material import RenderState
from src.core.transform import Transform


def test_identity_matrix():
    np.testing.assert_allclose(Transform().to_matrix(), np.eye(4))


def test_rotation_z_90_maps_x_to_y():
    t = Transform.from_degrees(rotation_deg=[0.0, 0.0, 90.0])
    out = t.to_matrix() @ np.array([1.0, 0.0, 0.0, 1.0])
    np.testing.assert_allclose(out[:3], [0.0, 1.0, 0.0], atol=1e-12)


def test_trs_order():
    t = Transform(position=[10.0, 0.0, 0.0], scale=[2.0, 3.0, 4.0])
    out = t.to_matrix() @ np.array([1.0, 1.0, 1.0, 1.0])
    np.testing.assert_allclose(out[:3], [12.0, 3.0, 4.0])


def test_copy_is_independent():
    t = Transform(position=[1.0, 2.0, 3.0])
    c = t.copy()
    assert c == t
    c.scale[1] = 5.0
    assert c != t
    assert float(t.scale[1]) == 1.0


def test_bad_vector_rejected():
    with pytest.raises(ValueError):
        Transform(position=[1.0, 2.0])


def test_render_state_identity_semantics():
    a = RenderState()
    b = RenderState()
    assert a != b
    assert a == a


def test_render_state_from_hex():
    state = RenderState.from_hex(0xFF8000, opacity=0.5)
    assert state.color == pytest.approx((1.0, 128 / 255.0, 0.0))
    assert state.opacity == 0.5
    assert not state.has_texture


def test_from_matrix_inverts_to_matrix():
    t = Transform.from_degrees(position=[1.0, -2.0, 3.0], rotation_deg=[10.0, -35.0, 70.0], scale=[2.0, 0.5, 1.5])
    back = Transform.from_matrix(t.to_matrix())
    np.testing.assert_allclose(back.position, t.position)
    np.testing.assert_allclose(back.rotation, t.rotation, atol=1e-12)
    np.testing.assert_allclose(back.scale, t.scale)


def test_from_matrix_gimbal_lock_round_trips_matrix():
    t = Transform.from_degrees(rotation_deg=[30.0, 90.0, 0.0])
    np.testing.assert_allclose(Transform.from_matrix(t.to_matrix()).to_matrix(), t.to_matrix(), atol=1e-9)
