import pytest

from worldanimator.animation import Animation
from worldanimator.camera import Camera
from worldanimator.math import Vector3
from worldanimator.paths import PathSampler, sample_path


def test_parameters_are_prefixed_and_owned(camera):
    ids = [p.parameter_id for p in camera.parameters]
    assert ids == [
        'camera.eye_lat',
        'camera.eye_lon',
        'camera.eye_elevation',
        'camera.lookat_lat',
        'camera.lookat_lon',
        'camera.lookat_elevation',
        'camera.roll',
        'camera.field_of_view',
    ]
    assert all(p.owner is camera for p in camera.parameters)
    assert camera.eye_lon.is_angular
    assert camera.roll.is_angular
    assert not camera.eye_lat.is_angular


def test_two_cameras_do_not_collide(camera):
    other = Camera('chase', globe_radius=1.0)
    animation = Animation('two cameras')
    camera.register_with(animation)
    other.register_with(animation)
    assert len(animation.get_parameters()) == 16


def test_lookat_position_at_frame(camera, camera_animation, linear_context):
    position = camera.get_lookat_position_at_frame(linear_context, camera_animation, 30)
    assert position == Vector3(-33.9, 151.2, 100.0)

    halfway = camera.get_lookat_position_at_frame(linear_context, camera_animation, 15)
    assert halfway.is_close(Vector3(-34.45, 150.1, 50.0), tolerance=1e-6)


def test_eye_position_is_constant_after_last_key(camera, camera_animation, hermite_context):
    assert camera.get_eye_position_at_frame(hermite_context, camera_animation, 60) == Vector3(-35.0, 148.0, 5000.0)


def test_set_position(camera, hermite_context):
    animation = Animation('keyed')
    camera.set_position(animation, 12, Vector3(1.0, 2.0, 3.0), lookat=Vector3(4.0, 5.0, 6.0))

    assert animation.get_key_frame(12) is not None
    assert len(animation.get_key_frame(12)) == 6
    assert camera.get_eye_position_at_frame(hermite_context, animation, 12) == Vector3(1.0, 2.0, 3.0)
    assert camera.get_lookat_position_at_frame(hermite_context, animation, 0) == Vector3(4.0, 5.0, 6.0)


def test_lookat_path_spans_whole_timeline(camera, camera_animation, linear_context):
    projection = camera.lookat_path_projection()
    path = sample_path(camera_animation, linear_context, camera.lookat_parameters, step=15, projection=projection)

    assert path.name == 'camera.lookat_path'
    assert path.frames == (0, 15, 30, 45, 60)
    # Frame 45 holds only eye values, so it is not a lookat key frame
    assert path.key_frame_flags == (True, False, True, False, True)
    assert path.positions[0] == Vector3(-35.0, 149.0, 0.0)
    assert path.positions[-1] == Vector3(-37.8, 145.0, 50.0)


def test_eye_path_flags(camera, camera_animation, linear_context, config):
    sampler = PathSampler(camera.eye_path_projection(), linear_context, config=config)
    path = sampler.sample(camera_animation, step=15)

    assert path.name == 'camera.eye_path'
    assert path.key_frame_flags == (True, False, False, True, False)
    assert path.positions[-1] == Vector3(-35.0, 148.0, 5000.0)


def test_world_space_projection(camera, linear_context):
    animation = Animation('equator')
    camera.set_position(animation, 0, Vector3(0.0, 0.0, 0.0))
    camera.set_position(animation, 10, Vector3(0.0, 90.0, 1000.0))

    path = sample_path(animation, linear_context, camera.eye_parameters, step=10,
                       projection=camera.eye_path_projection(world_space=True))

    radius = camera.globe_radius
    assert path.positions[0].is_close(Vector3(0.0, 0.0, radius))
    assert path.positions[1].x == pytest.approx(radius + 1000.0)
    assert path.positions[1].z == pytest.approx(0.0, abs=1e-6)
    assert camera.to_world(Vector3(0.0, 0.0, 0.0)) == path.positions[0]


def test_longitude_crosses_antimeridian(linear_context):
    camera = Camera('pacific', globe_radius=1.0)
    animation = Animation('dateline')
    camera.set_position(animation, 0, Vector3(0.0, 179.0, 100.0))
    camera.set_position(animation, 4, Vector3(0.0, -179.0, 100.0))

    lon = camera.get_eye_position_at_frame(linear_context, animation, 1).y
    assert lon == pytest.approx(179.5)
    lon = camera.get_eye_position_at_frame(linear_context, animation, 3).y
    assert lon == pytest.approx(-179.5)
