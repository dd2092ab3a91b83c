"""Tests for the per-platform output parsers."""

from __future__ import annotations

from port_manager.port_resolver_helpers.output_parsers import (
    parse_linux_netstat_output,
    parse_lsof_output,
    parse_ss_output,
    parse_windows_netstat_output,
)
from port_manager.port_resolver_helpers.process_models import (
    UNKNOWN_COMMAND,
    ProcessRecord,
    filter_records_for_port,
)

LSOF_OUTPUT = """\
COMMAND   PID USER   FD   TYPE             DEVICE SIZE/OFF NODE NAME
java     1234 user   50u  IPv6 0x0                 0t0  TCP *:3000 (LISTEN)
node     5678 user   22u  IPv4 0xa1b2c3d4e5f6      0t0  TCP 127.0.0.1:30001 (LISTEN)
node     5678 user   23u  IPv6 0xf6e5d4c3b2a1      0t0  TCP [::1]:3000 (LISTEN)
"""

WINDOWS_NETSTAT_OUTPUT = """\

Active Connections

  Proto  Local Address          Foreign Address        State           PID
  TCP    0.0.0.0:135            0.0.0.0:0              LISTENING       1008
  TCP    0.0.0.0:8080           0.0.0.0:0              LISTENING       4567
  TCP    127.0.0.1:8080         127.0.0.1:52144        ESTABLISHED     4567
  TCP    192.168.1.5:52144      10.0.0.1:8080          ESTABLISHED     9999
  TCP    [::]:8080              [::]:0                 LISTENING       4567
  UDP    0.0.0.0:8080           *:*                                    3333
"""

SS_OUTPUT = """\
Netid State  Recv-Q Send-Q Local Address:Port   Peer Address:Port Process
udp   UNCONN 0      0      127.0.0.53%lo:53     0.0.0.0:*         users:(("systemd-resolve",pid=612,fd=13))
tcp   LISTEN 0      511    0.0.0.0:8080         0.0.0.0:*         users:(("node",pid=9999,fd=22))
tcp   LISTEN 0      4096   [::]:8080            [::]:*            users:(("node",pid=9999,fd=23))
tcp   LISTEN 0      128    0.0.0.0:80           0.0.0.0:*         users:(("nginx",pid=101,fd=6),("nginx",pid=100,fd=6))
tcp   LISTEN 0      128    127.0.0.1:5432       0.0.0.0:*
"""

LINUX_NETSTAT_OUTPUT = """\
Active Internet connections (only servers)
Proto Recv-Q Send-Q Local Address           Foreign Address         State       PID/Program name
tcp        0      0 0.0.0.0:8080            0.0.0.0:*               LISTEN      1234/java
tcp        0      0 127.0.0.1:5432          0.0.0.0:*               LISTEN      -
tcp6       0      0 :::8080                 :::*                    LISTEN      1234/java
tcp6       0      0 :::80                   :::*                    LISTEN      777/nginx: master
tcp        0      0 0.0.0.0:9000            0.0.0.0:*               LISTEN      4242
udp        0      0 0.0.0.0:68              0.0.0.0:*                           555/dhclient
"""


class TestParseLsofOutput:
    """Tests for parse_lsof_output."""

    def test_parses_single_fixture_line(self) -> None:
        """Extracts command, pid and port from a bare lsof line."""
        records = parse_lsof_output("java 1234 user 50u IPv6 0x0 0t0 TCP *:3000 (LISTEN)")

        assert records == [ProcessRecord(pid="1234", command="java", port="3000")]

    def test_skips_header_and_keeps_every_listener(self) -> None:
        """Header line contributes nothing; all listening lines are parsed."""
        records = parse_lsof_output(LSOF_OUTPUT)

        assert [(r.pid, r.command, r.port) for r in records] == [
            ("1234", "java", "3000"),
            ("5678", "node", "30001"),
            ("5678", "node", "3000"),
        ]

    def test_ignores_non_listening_lines(self) -> None:
        """Established connections are not listeners."""
        line = "Safari 321 user 30u IPv4 0x1 0t0 TCP 10.0.0.2:51000->17.0.0.1:443 (ESTABLISHED)"

        assert parse_lsof_output(line) == []


class TestParseWindowsNetstatOutput:
    """Tests for parse_windows_netstat_output."""

    def test_fixture_line_yields_pid(self) -> None:
        """The canonical LISTENING line yields its pid and port."""
        records = parse_windows_netstat_output("  TCP    0.0.0.0:8080   0.0.0.0:0    LISTENING       4567")

        assert records == [ProcessRecord(pid="4567", command=UNKNOWN_COMMAND, port="8080")]

    def test_fixture_line_filtered_for_other_port(self) -> None:
        """The same line queried for another port yields nothing."""
        records = parse_windows_netstat_output("  TCP    0.0.0.0:8080   0.0.0.0:0    LISTENING       4567")

        assert filter_records_for_port(records, 9090) == []

    def test_established_and_udp_lines_do_not_match(self) -> None:
        """Only TCP LISTENING rows are candidates."""
        records = parse_windows_netstat_output(WINDOWS_NETSTAT_OUTPUT)

        assert [(r.pid, r.port) for r in records] == [("1008", "135"), ("4567", "8080"), ("4567", "8080")]

    def test_handles_crlf_line_endings(self) -> None:
        """Carriage returns left in the output do not break matching."""
        output = "  TCP    0.0.0.0:8080   0.0.0.0:0    LISTENING       4567\r\n  TCP    0.0.0.0:135   0.0.0.0:0    LISTENING       1008\r\n"

        records = parse_windows_netstat_output(output)

        assert [r.pid for r in records] == ["4567", "1008"]


class TestParseSsOutput:
    """Tests for parse_ss_output."""

    def test_extracts_name_and_pid_from_users_token(self) -> None:
        """The quoted process name and pid come from users:(...)."""
        records = filter_records_for_port(parse_ss_output(SS_OUTPUT), 8080)

        assert records == [ProcessRecord(pid="9999", command="node", port="8080")]

    def test_emits_one_record_per_process_sharing_a_socket(self) -> None:
        """Every entry in a multi-process users token becomes a record."""
        records = filter_records_for_port(parse_ss_output(SS_OUTPUT), 80)

        assert [(r.pid, r.command) for r in records] == [("101", "nginx"), ("100", "nginx")]

    def test_skips_udp_and_sockets_without_owner(self) -> None:
        """UNCONN rows and rows without a users token produce nothing."""
        records = parse_ss_output(SS_OUTPUT)

        assert {r.port for r in records} == {"8080", "80"}

    def test_parses_output_without_netid_column(self) -> None:
        """ss omits the Netid column when only TCP is requested."""
        output = 'LISTEN 0 511 *:8080 *:* users:(("node",pid=9999,fd=22))'

        assert parse_ss_output(output) == [ProcessRecord(pid="9999", command="node", port="8080")]


class TestParseLinuxNetstatOutput:
    """Tests for parse_linux_netstat_output."""

    def test_splits_pid_and_program_name(self) -> None:
        """The PID/Program column is split into pid and command."""
        records = filter_records_for_port(parse_linux_netstat_output(LINUX_NETSTAT_OUTPUT), 8080)

        assert records == [ProcessRecord(pid="1234", command="java", port="8080")]

    def test_program_name_may_contain_spaces(self) -> None:
        """Names such as 'nginx: master' are kept whole."""
        records = filter_records_for_port(parse_linux_netstat_output(LINUX_NETSTAT_OUTPUT), 80)

        assert records[0].command == "nginx: master"

    def test_missing_program_name_uses_placeholder(self) -> None:
        """A bare pid gets the unknown placeholder."""
        records = filter_records_for_port(parse_linux_netstat_output(LINUX_NETSTAT_OUTPUT), 9000)

        assert records == [ProcessRecord(pid="4242", command=UNKNOWN_COMMAND, port="9000")]

    def test_hidden_owner_is_skipped(self) -> None:
        """Sockets shown with '-' (no permission) have no pid to report."""
        records = filter_records_for_port(parse_linux_netstat_output(LINUX_NETSTAT_OUTPUT), 5432)

        assert records == []
