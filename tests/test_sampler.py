import pytest

from worldanimator.animation import Animation, Parameter
from worldanimator.errors import EmptyTimelineError, InvalidStepError, NoKeyFramesError, SamplingCancelledError
from worldanimator.math import Vector1, Vector2, Vector3, VectorKind
from worldanimator.paths import CancellationToken, PathProjection, PathSampler, sample_path
from worldanimator.paths.projections import component_projection, single_parameter_projection
from worldanimator.paths.sampler import sample_frames


@pytest.fixture
def heading():
    return Parameter('heading', 'Heading', VectorKind.SCALAR, wrap_components=(True,))


class TestSampleFrames:
    @pytest.mark.parametrize("first, last, step, expected", [
        (0, 20, 1, list(range(21))),
        (0, 20, 5, [0, 5, 10, 15, 20]),
        (0, 20, 6, [0, 6, 12, 18, 20]),
        (3, 3, 4, [3]),
        (2, 9, 100, [2, 9]),
    ])
    def test_last_frame_always_included(self, first, last, step, expected):
        assert sample_frames(first, last, step) == expected


class TestSamplePath:
    def test_reference_scenario(self, elevation_animation, elevation, hermite_context):
        path = sample_path(elevation_animation, hermite_context, [elevation], step=5)

        assert path.frames == (0, 5, 10, 15, 20)
        assert [p.x for p in path.positions] == pytest.approx([1000.0, 1625.0, 2000.0, 1625.0, 1000.0])
        assert path.key_frame_flags == (True, False, True, False, True)
        assert path.key_frame_positions() == [Vector1(1000.0), Vector1(2000.0), Vector1(1000.0)]
        assert path.revision == elevation_animation.revision

    @pytest.mark.parametrize("step", [1, 2, 3, 7, 20, 50])
    def test_sample_count(self, elevation_animation, elevation, linear_context, step):
        path = sample_path(elevation_animation, linear_context, [elevation], step=step)
        span = 20
        expected = span // step + 1 + (1 if span % step else 0)
        assert len(path) == expected
        assert path.frames[0] == 0
        assert path.frames[-1] == 20

    def test_range_spans_all_key_frames(self, elevation_animation, elevation, heading, linear_context):
        # The timeline range includes key frames of untracked parameters
        elevation_animation.add_or_replace_value(heading, 30, 0.0)
        path = sample_path(elevation_animation, linear_context, [elevation], step=10)

        assert path.frames == (0, 10, 20, 30)
        assert path.positions[-1] == Vector1(1000.0)
        assert path.key_frame_flags == (True, True, True, False)

    def test_flags_consider_any_tracked_parameter(self, animation, elevation, heading, linear_context):
        animation.add_or_replace_value(elevation, 0, 0.0)
        animation.add_or_replace_value(elevation, 10, 10.0)
        animation.add_or_replace_value(heading, 0, 0.0)
        animation.add_or_replace_value(heading, 4, 40.0)

        path = sample_path(animation, linear_context, [elevation, heading], step=2)
        assert path.frames == (0, 2, 4, 6, 8, 10)
        assert path.key_frame_flags == (True, False, True, False, False, True)
        assert path.positions[1] == Vector2(pytest.approx(2.0), pytest.approx(20.0))

    def test_unordered_parameters_get_stable_component_order(self, animation, elevation, heading, linear_context):
        animation.add_or_replace_value(elevation, 0, 1.0)
        animation.add_or_replace_value(heading, 0, 2.0)

        path = sample_path(animation, linear_context, {heading, elevation})
        assert path.positions == (Vector2(1.0, 2.0),)

    def test_empty_timeline(self, animation, elevation, linear_context):
        animation.register_parameter(elevation)
        with pytest.raises(EmptyTimelineError):
            sample_path(animation, linear_context, [elevation])

    def test_tracked_parameter_without_values(self, elevation_animation, heading, linear_context):
        with pytest.raises(NoKeyFramesError):
            sample_path(elevation_animation, linear_context, [heading])

    @pytest.mark.parametrize("step", [0, -2, 1.5, True, None])
    def test_invalid_step(self, elevation_animation, elevation, linear_context, step):
        with pytest.raises(InvalidStepError):
            sample_path(elevation_animation, linear_context, [elevation], step=step)

    def test_no_tracked_parameters(self, elevation_animation, linear_context):
        with pytest.raises(ValueError):
            sample_path(elevation_animation, linear_context, [])

    def test_projection_must_match_tracked_parameters(self, elevation_animation, elevation, heading, linear_context):
        projection = single_parameter_projection(heading)
        with pytest.raises(ValueError):
            sample_path(elevation_animation, linear_context, [elevation], projection=projection)

    def test_custom_projection(self, elevation_animation, elevation, linear_context):
        doubled = PathProjection('doubled', (elevation,), lambda values: values[0] * 2)
        path = sample_path(elevation_animation, linear_context, [elevation], step=10, projection=doubled)
        assert [p.x for p in path.positions] == [2000.0, 4000.0, 2000.0]
        assert path.name == 'doubled'

    def test_cancelled_before_start(self, elevation_animation, elevation, linear_context):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(SamplingCancelledError) as exc_info:
            sample_path(elevation_animation, linear_context, [elevation], cancel_token=token)
        assert exc_info.value.details['reason'] == 'cancelled'
        assert exc_info.value.details['completed'] == 0

    def test_cancelled_midway(self, elevation_animation, elevation, linear_context):
        token = CancellationToken()
        seen = []

        def combine(values):
            seen.append(values[0])
            if len(seen) == 3:
                token.cancel()
            return values[0]

        projection = PathProjection('cancelling', (elevation,), combine)
        with pytest.raises(SamplingCancelledError):
            sample_path(elevation_animation, linear_context, [elevation], projection=projection, cancel_token=token)
        assert len(seen) == 3

    def test_stale_samples_are_abandoned(self, elevation_animation, elevation, linear_context):
        def editing_combine(values):
            elevation_animation.add_or_replace_value(elevation, 40, 0.0)
            return values[0]

        projection = PathProjection('editing', (elevation,), editing_combine)
        with pytest.raises(SamplingCancelledError) as exc_info:
            sample_path(elevation_animation, linear_context, [elevation], projection=projection, abandon_stale=True)
        assert exc_info.value.details['reason'] == 'stale'

    def test_samples_one_snapshot_when_not_abandoning(self, elevation_animation, elevation, linear_context):
        snapshot_revision = elevation_animation.revision

        def editing_combine(values):
            elevation_animation.add_or_replace_value(elevation, 10, -1.0)
            return values[0]

        projection = PathProjection('editing', (elevation,), editing_combine)
        path = sample_path(elevation_animation, linear_context, [elevation], step=10, projection=projection)

        assert path.revision == snapshot_revision
        assert path.positions[1] == Vector1(2000.0)

    def test_to_dict(self, elevation_animation, elevation, linear_context):
        data = sample_path(elevation_animation, linear_context, [elevation], step=20).to_dict()
        assert data == {
            'name': 'elevation',
            'revision': elevation_animation.revision,
            'step': 20,
            'frames': [0, 20],
            'positions': [[1000.0], [1000.0]],
            'key_frame_flags': [True, True],
        }


class TestProjections:
    def test_component_projection_limits(self, elevation):
        position = Parameter('position', 'Position', VectorKind.VECTOR3)
        with pytest.raises(ValueError):
            component_projection('too-wide', [position, elevation])

        projection = component_projection('lat-lon-elev', [elevation, elevation, elevation])
        assert projection.project([Vector1(1.0), Vector1(2.0), Vector1(3.0)]) == Vector3(1.0, 2.0, 3.0)

    def test_projection_needs_parameters(self):
        with pytest.raises(ValueError):
            PathProjection('empty', (), lambda values: values[0])


class TestPathSampler:
    def test_cache_returns_same_path_until_edit(self, elevation_animation, elevation, linear_context, config):
        sampler = PathSampler(single_parameter_projection(elevation), linear_context, config=config)

        first = sampler.sample(elevation_animation)
        assert sampler.sample(elevation_animation) is first
        assert first.step == config.default_path_step

        elevation_animation.add_or_replace_value(elevation, 5, 0.0)
        second = sampler.sample(elevation_animation)
        assert second is not first
        assert second.revision == elevation_animation.revision
        assert second.positions[5] == Vector1(0.0)

        info = sampler.cache_info()
        assert info['hits'] == 1
        assert info['misses'] == 2

    def test_steps_are_cached_separately(self, elevation_animation, elevation, linear_context, config):
        sampler = PathSampler(single_parameter_projection(elevation), linear_context, config=config)
        coarse = sampler.sample(elevation_animation, step=10)
        fine = sampler.sample(elevation_animation, step=1)

        assert len(coarse) == 3
        assert len(fine) == 21
        assert sampler.sample(elevation_animation, step=10) is coarse

    def test_cache_is_bounded_and_invalidated(self, elevation_animation, elevation, linear_context, config):
        sampler = PathSampler(single_parameter_projection(elevation), linear_context,
                              cache_max_entries=2, config=config)
        for step in (1, 2, 3):
            sampler.sample(elevation_animation, step=step)
        assert sampler.cache_info()['size'] == 2

        sampler.invalidate()
        assert sampler.cache_info()['size'] == 0

    def test_cancelled_resample_is_not_cached(self, elevation_animation, elevation, linear_context, config):
        sampler = PathSampler(single_parameter_projection(elevation), linear_context, config=config)
        token = CancellationToken()
        token.cancel()

        with pytest.raises(SamplingCancelledError):
            sampler.sample(elevation_animation, cancel_token=token)

        info = sampler.cache_info()
        assert info['cancelled'] == 1
        assert info['size'] == 0

    def test_abandon_stale_defaults_from_config(self, elevation, linear_context, config):
        assert PathSampler(single_parameter_projection(elevation), linear_context, config=config).abandon_stale
        config.set('abandon_stale_samples', False)
        assert not PathSampler(single_parameter_projection(elevation), linear_context, config=config).abandon_stale

    def test_samplers_share_animation_across_paths(self, elevation, heading, linear_context, config):
        animation = Animation('shared')
        animation.add_or_replace_value(elevation, 0, 1.0)
        animation.add_or_replace_value(heading, 10, 20.0)

        elevation_path = PathSampler(single_parameter_projection(elevation), linear_context, config=config)
        heading_path = PathSampler(single_parameter_projection(heading), linear_context, config=config)

        assert elevation_path.sample(animation, step=5).frames == (0, 5, 10)
        assert heading_path.sample(animation, step=5).positions == (Vector1(20.0),) * 3
        assert heading_path.name == 'heading'
