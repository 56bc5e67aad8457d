from traitlets import HasTraits, Tuple, Undefined

from cyclestreets.bikedata._viewport import ViewportTracker, format_extent


class FakeMap(HasTraits):
    bounds = Tuple()


def test_format_extent_orders_west_south_east_north():
    bounds = ((51.49812, -0.11234), (51.51209, -0.06771))
    assert format_extent(bounds) == "-0.1123,51.4981,-0.0677,51.5121"


def test_format_extent_before_map_rendered():
    assert format_extent(()) is None


def test_current_extent_reads_live_bounds():
    m = FakeMap()
    tracker = ViewportTracker(m)
    assert tracker.current_extent() is None

    m.bounds = ((52.0, 0.1), (52.1, 0.2))
    assert tracker.current_extent() == "0.1000,52.0000,0.2000,52.1000"


def test_one_callback_per_settled_change():
    m = FakeMap()
    tracker = ViewportTracker(m)
    seen = []
    tracker.on_extent_settled(seen.append)

    m.bounds = ((52.0, 0.1), (52.1, 0.2))
    m.bounds = ((52.0, 0.1), (52.1, 0.2))
    m.bounds = ((52.00001, 0.1), (52.1, 0.2))
    m.bounds = ((53.0, 1.1), (53.1, 1.2))

    assert seen == ["0.1000,52.0000,0.2000,52.1000", "1.1000,53.0000,1.2000,53.1000"]


def test_cleared_bounds_do_not_fire():
    m = FakeMap()
    m.bounds = ((52.0, 0.1), (52.1, 0.2))
    tracker = ViewportTracker(m)
    seen = []
    tracker.on_extent_settled(seen.append)

    m.bounds = ()
    assert seen == []


def test_format_extent_ignores_unset_bounds():
    assert format_extent(Undefined) is None
    assert format_extent(None) is None
    assert format_extent(((52.0, 0.1),)) is None
