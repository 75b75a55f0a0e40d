# pktperf

pktperf holds the configuration and protocol layer of a stateful network
load generator. It reads keyword-style configuration files, checks that the
settings fit together and fills in defaults. It also builds and parses the
pieces of traffic such a generator deals with: Ethernet headers, ARP
requests and replies, IPv4/IPv6 checksums, and minimal HTTP/1.1 requests
and responses.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Configuration files

A configuration file has one keyword per line, followed by its arguments.
Lines whose first word starts with `#` are comments.

```
mode        client
cpu         0-3
port        0000:13:00.0 192.168.1.3 192.168.1.1
client      192.168.1.10 10
server      192.168.1.100 1
cps         10k
duration    2m
protocol    http
keepalive   1ms 10
rss         l3
```

`pktperf -m` lists every keyword with a short description of its arguments.

## Command line

```
pktperf -t -c client.conf     # check the configuration file, print "Config file OK" and exit
pktperf -c client.conf        # check the file and print the per-worker plan
pktperf -m                    # list every keyword with its arguments
pktperf -v                    # print the version
pktperf -h                    # list the options
```

Long forms (`--conf`, `--test`, `--manual`, `--version`, `--help`) are
accepted as well. Errors in the file are reported with their line number;
settings that the checks change on their own (such as turning RSS off when
there is one worker per port) are reported as warnings. The exit status is
0 on success and 1 on any error.

The plan printed without `-t` gives the mode, protocol, number of workers
and duration, then for each worker its CPU, port, queue and the number of
sockets it can use.

## Library use

```python
from pktperf.settings import Config
from pktperf.keywords import load_config_file
from pktperf.validate import check_config

cfg = load_config_file("client.conf", Config())
payload_size = check_config(cfg)   # raises ConfigError when the settings do not fit together
```

`pktperf.validate` also offers `port_for_thread`, `total_socket_num` and
`set_tsc` (which converts the keepalive interval to counter ticks).

Other modules that work on their own:

- `pktperf.eth`: `EthAddr` and `EthHeader` for MAC addresses and Ethernet headers.
- `pktperf.ip`: `IpAddr` and `IpRange` for IPv4/IPv6 addresses and address ranges.
- `pktperf.ip_list`: `IpList`, a round-robin list of destination addresses.
- `pktperf.csum`: Internet checksums, incremental updates and `verify_packet`
  for checking the IP and TCP/UDP checksums of a frame.
- `pktperf.arp`: `ArpHeader`, `build_request` and `build_reply`.
- `pktperf.http`: `build_request`, `build_response` and `make_payload` for
  payloads of a given size; `classify_request` and `classify_response`.
- `pktperf.http_parse`: `HttpParser`, a streaming parser for HTTP/1.1 response
  framing that handles Content-Length and chunked bodies.
- `pktperf.config_keyword`: the generic `keyword arg ...` file parser.
- `pktperf.client`: `assign_task` and `client_launch`, which divide connection
  targets among workers and pace their launches.
- `pktperf.cpuload`: `CpuLoad`, which measures CPU usage per worker.

## What pktperf does not do

pktperf does not open network interfaces and does not send or receive any
traffic. It has no TCP/UDP connection handling, no worker threads, no
running statistics and no log files. Settings such as `daemon`, `kni`,
`vxlan`, `vlan`, `bond` ports and `rss` are read and checked, but nothing
in the package acts on them beyond that.