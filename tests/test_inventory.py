# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# tests/test_inventory.py

"""Unit tests for decoding `btrbk list --format=raw` output."""

import pytest

from btrbk_check.exceptions import InventoryError
from btrbk_check.inventory import (
    decode_pairs,
    decode_raw_line,
    list_command,
    list_pairs,
)
from btrbk_check.types import CheckPolicy, Pair
from tests.fixtures.fake_rsync import make_fake_command, recorded_argv

LOCAL_LINE = ('format="latest" snapshot_path="/mnt/btr_pool/home.20261019" '
              'target_path="/mnt/backup/home.20261019" source_host="" '
              'target_host="" source_rsh=""')
REMOTE_LINE = ("snapshot_path='/snap/data.1' target_path='/backup/data.1' "
               "source_host='src.lan' target_host='nas.lan' "
               "source_rsh='ssh -q -p 22 root@src.lan'")


class TestDecode:

    def test_local_line(self):
        [pair] = decode_pairs([LOCAL_LINE])
        assert pair == Pair(source_path="/mnt/btr_pool/home.20261019",
                            dest_path="/mnt/backup/home.20261019")

    def test_remote_line(self):
        [pair] = decode_pairs([REMOTE_LINE])
        assert pair.src == "src.lan:/snap/data.1"
        assert pair.dest == "nas.lan:/backup/data.1"
        assert pair.source_rsh == "ssh -q -p 22 root@src.lan"

    def test_missing_keys_are_empty(self):
        [pair] = decode_pairs(['target_path="/backup/orphan"'])
        assert pair.source_path == ""
        assert pair.source_host is None

    def test_blank_lines_skipped(self):
        assert list(decode_pairs(["", "   \n", LOCAL_LINE + "\n"])) == [
            Pair("/mnt/btr_pool/home.20261019", "/mnt/backup/home.20261019")]

    def test_values_are_never_evaluated(self):
        fields = decode_raw_line(
            'snapshot_path="$(touch /tmp/pwned)" target_path=`id` x;y=1')
        assert fields["snapshot_path"] == "$(touch /tmp/pwned)"
        assert fields["target_path"] == "`id`"

    def test_tokens_without_equals_ignored(self):
        assert decode_raw_line("latest snapshot_path=/a") == {"snapshot_path": "/a"}

    def test_unbalanced_quotes(self):
        with pytest.raises(InventoryError):
            decode_raw_line('snapshot_path="/a')


class TestListPairs:

    def test_list_command(self):
        assert list_command(CheckPolicy(), ["/mnt/btr_pool"]) == [
            "btrbk", "list", "latest", "--format=raw", "/mnt/btr_pool"]
        assert list_command(CheckPolicy(scope="all"))[2] == "backups"

    def test_streams_pairs(self, tmp_path):
        btrbk = make_fake_command(tmp_path, [LOCAL_LINE, REMOTE_LINE],
                                  name="btrbk")
        policy = CheckPolicy(btrbk_bin=str(btrbk))
        pairs = list(list_pairs(policy, ["-c", "/etc/btrbk/test.conf"]))
        assert len(pairs) == 2
        assert recorded_argv(btrbk) == [
            "list", "latest", "--format=raw", "-c", "/etc/btrbk/test.conf"]

    def test_btrbk_failure(self, tmp_path):
        btrbk = make_fake_command(tmp_path, [LOCAL_LINE], exit_code=10,
                                  name="btrbk")
        pairs = list_pairs(CheckPolicy(btrbk_bin=str(btrbk)))
        assert next(pairs).dest_path == "/mnt/backup/home.20261019"
        with pytest.raises(InventoryError, match="exit status 10"):
            next(pairs)

    def test_btrbk_missing(self, tmp_path):
        policy = CheckPolicy(btrbk_bin=str(tmp_path / "no-btrbk"))
        with pytest.raises(InventoryError, match="Failed to run"):
            list(list_pairs(policy))
