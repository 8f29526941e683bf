import os

import pytest

from helpers import FakeHasher, write_file
from tidymedia import decisions
from tidymedia.decisions import DecisionEngine
from tidymedia.registry import IdentityRegistry
from tidymedia.resolver import TargetResolver


@pytest.fixture
def engine(target_dir, counting_hasher):
    registry = IdentityRegistry(counting_hasher)
    return DecisionEngine(registry, TargetResolver(target_dir))


def dated(target_dir, name, day="2020-01-05"):
    return target_dir / day[:4] / day / name


def test_missing_source_is_not_found(engine, tmp_path):
    action = engine.decide_move(str(tmp_path / "nope.jpg"))
    assert action.kind == decisions.NOT_FOUND
    assert action.target == ""
    assert not action.actionable


def test_plain_move_does_not_hash(engine, tmp_path, target_dir, counting_hasher):
    src = write_file(tmp_path / "a" / "2020-01-05" / "x.jpg", "x")
    action = engine.decide_move(str(src))
    assert action.kind == decisions.MOVE
    assert action.target == str(dated(target_dir, "x.jpg"))
    assert action.actionable
    assert counting_hasher.calls == []


def test_file_already_in_place_is_no_op(engine, target_dir):
    src = write_file(dated(target_dir, "x.jpg"), "x")
    action = engine.decide_move(str(src))
    assert action.kind == decisions.NO_OP
    assert not action.actionable


def test_identical_target_is_duplicate_move(engine, tmp_path, target_dir):
    write_file(dated(target_dir, "x.jpg"), "same")
    src = write_file(tmp_path / "b" / "2020-01-05" / "x.jpg", "same")
    action = engine.decide_move(str(src))
    assert action.kind == decisions.DUPLICATE_MOVE
    assert action.target == str(dated(target_dir, "x.jpg"))


def test_different_target_gets_numbered_name(engine, tmp_path, target_dir):
    write_file(dated(target_dir, "photo.jpg"), "first")
    write_file(dated(target_dir, "photo-2.jpg"), "second")
    src = write_file(tmp_path / "c" / "2020-01-05" / "photo.jpg", "third")
    action = engine.decide_move(str(src))
    assert action.kind == decisions.MOVE_RENAMED
    assert action.target == str(dated(target_dir, "photo-3.jpg"))
    assert not os.path.exists(action.target)


def test_numbered_candidate_with_same_content_is_duplicate(engine, tmp_path, target_dir):
    write_file(dated(target_dir, "photo.jpg"), "first")
    write_file(dated(target_dir, "photo-2.jpg"), "second")
    src = write_file(tmp_path / "c" / "2020-01-05" / "photo.jpg", "second")
    action = engine.decide_move(str(src))
    assert action.kind == decisions.DUPLICATE_MOVE
    assert action.target == str(dated(target_dir, "photo-2.jpg"))


def test_renamed_file_is_no_op_on_rerun(engine, target_dir, counting_hasher):
    write_file(dated(target_dir, "photo.jpg"), "first")
    src = write_file(dated(target_dir, "photo-2.jpg"), "second")
    action = engine.decide_move(str(src))
    assert action.kind == decisions.NO_OP
    assert counting_hasher.calls == []


def test_unhashable_target_is_never_treated_as_duplicate(tmp_path, target_dir):
    src = write_file(tmp_path / "a" / "2020-01-05" / "x.jpg", "x")
    write_file(dated(target_dir, "x.jpg"), "x")
    registry = IdentityRegistry(FakeHasher({str(src): "d1"}))
    engine = DecisionEngine(registry, TargetResolver(target_dir))
    action = engine.decide_move(str(src))
    assert action.kind == decisions.MOVE_RENAMED
    assert action.target == str(dated(target_dir, "x-2.jpg"))


def test_source_linked_to_its_own_target_is_no_op(engine, tmp_path, target_dir):
    real = write_file(dated(target_dir, "x.jpg"), "x")
    link = tmp_path / "links" / "2020-01-05" / "x.jpg"
    link.parent.mkdir(parents=True)
    link.symlink_to(real)
    action = engine.decide_move(str(link))
    assert action.kind == decisions.NO_OP
    assert not action.actionable


def test_target_reached_through_linked_directory_is_no_op(engine, tmp_path, target_dir):
    write_file(dated(target_dir, "x.jpg"), "x")
    alias = tmp_path / "alias"
    alias.symlink_to(target_dir, target_is_directory=True)
    action = engine.decide_move(str(alias / "2020" / "2020-01-05" / "x.jpg"))
    assert action.kind == decisions.NO_OP


def test_source_linked_to_numbered_name_is_no_op(engine, tmp_path, target_dir):
    write_file(dated(target_dir, "photo.jpg"), "first")
    renamed = write_file(dated(target_dir, "photo-2.jpg"), "second")
    link = tmp_path / "links" / "2020-01-05" / "photo.jpg"
    link.parent.mkdir(parents=True)
    link.symlink_to(renamed)
    action = engine.decide_move(str(link))
    assert action.kind == decisions.NO_OP
    assert action.target == str(renamed)


def make_dedup(counting_hasher, dedup_filter=None):
    return DecisionEngine(IdentityRegistry(counting_hasher), dedup_filter=dedup_filter)


def test_dedup_keeps_first_and_flags_later_copies(tmp_path, counting_hasher):
    engine = make_dedup(counting_hasher)
    a = write_file(tmp_path / "a.jpg", "same")
    b = write_file(tmp_path / "b.jpg", "same")
    c = write_file(tmp_path / "c.jpg", "other")
    assert engine.decide_dedup(str(a)).kind == decisions.UNIQUE
    dup = engine.decide_dedup(str(b))
    assert dup.kind == decisions.DUPLICATE_DELETE
    assert dup.orig == str(a)
    assert engine.decide_dedup(str(c)).kind == decisions.UNIQUE


def test_dedup_same_path_twice_is_unique(tmp_path, counting_hasher):
    engine = make_dedup(counting_hasher)
    a = write_file(tmp_path / "a.jpg", "same")
    engine.decide_dedup(str(a))
    assert engine.decide_dedup(str(a)).kind == decisions.UNIQUE
    assert len(counting_hasher.calls) == 1


def test_dedup_same_file_through_linked_directory_is_unique(tmp_path, counting_hasher):
    engine = make_dedup(counting_hasher)
    real = write_file(tmp_path / "real" / "x.jpg", "same")
    alias = tmp_path / "alias"
    alias.symlink_to(tmp_path / "real", target_is_directory=True)
    assert engine.decide_dedup(str(real)).kind == decisions.UNIQUE
    assert engine.decide_dedup(str(alias / "x.jpg")).kind == decisions.UNIQUE


def test_dedup_linked_file_is_unique_either_way(tmp_path, counting_hasher):
    engine = make_dedup(counting_hasher)
    real = write_file(tmp_path / "real.jpg", "same")
    link = tmp_path / "link.jpg"
    link.symlink_to(real)
    assert engine.decide_dedup(str(link)).kind == decisions.UNIQUE
    assert engine.decide_dedup(str(real)).kind == decisions.UNIQUE


def test_dedup_filter_protects_non_matching_paths(tmp_path, counting_hasher):
    engine = make_dedup(counting_hasher, dedup_filter=r"/inbox/")
    write_file(tmp_path / "library" / "a.jpg", "same")
    engine.decide_dedup(str(tmp_path / "library" / "a.jpg"))
    kept = write_file(tmp_path / "archive" / "a.jpg", "same")
    deleted = write_file(tmp_path / "inbox" / "a.jpg", "same")
    assert engine.decide_dedup(str(kept)).kind == decisions.DUPLICATE_KEPT
    assert engine.decide_dedup(str(deleted)).kind == decisions.DUPLICATE_DELETE


def test_dedup_original_removed_from_disk(tmp_path, counting_hasher):
    engine = make_dedup(counting_hasher)
    a = write_file(tmp_path / "a.jpg", "same")
    engine.decide_dedup(str(a))
    a.unlink()
    b = write_file(tmp_path / "b.jpg", "same")
    assert engine.decide_dedup(str(b)).kind == decisions.DUPLICATE_KEPT


def test_dedup_missing_file(tmp_path, counting_hasher):
    engine = make_dedup(counting_hasher)
    assert engine.decide_dedup(str(tmp_path / "none.jpg")).kind == decisions.NOT_FOUND


def test_comments_follow_kind():
    action = decisions.Action("a", decisions.MOVE, "b")
    assert action.comment == "move file"
    assert decisions.Action("a", decisions.DUPLICATE_MOVE, "b").comment == "move file (proven duplicate)"
