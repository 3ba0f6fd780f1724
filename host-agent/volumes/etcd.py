"""
Etcd cluster spec tag format.

A volume tagged ``k8s.io/etcd/<cluster>=<node>/<peer1>,<peer2>,...`` says the
volume holds the data of member ``<node>`` in an etcd cluster whose members are
the listed peers.
"""

from models import EtcdClusterSpec


def parse_etcd_cluster_spec(cluster_key: str, value: str) -> EtcdClusterSpec:
    """Parse a tag value; raise ValueError if it is malformed."""
    value = value.strip()
    tokens = value.split("/")
    if len(tokens) != 2:
        raise ValueError(f"invalid etcd cluster spec (expected two tokens): {value!r}")
    node_name = tokens[0].strip()
    node_names = [n.strip() for n in tokens[1].split(",")]
    if not node_name or not all(node_names):
        raise ValueError(f"invalid etcd cluster spec (empty node name): {value!r}")
    return EtcdClusterSpec(cluster_key=cluster_key, node_name=node_name, node_names=node_names)
