# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Host network introspection: default route lookup and the capabilities the
container needs for virtual network interfaces.
"""
import logging
import socket
import struct
from typing import List, Optional
from ..MODELS.container_spec import DeviceMapping

logger = logging.getLogger(__name__)

RTF_UP = 0x0001
RTF_GATEWAY = 0x0002

NET_ADMIN_CAPABILITY = "NET_ADMIN"
TUN_DEVICE = "/dev/net/tun"

def default_gateway(route_table_path: str = "/proc/net/route") -> Optional[str]:
    """
    Finds the gateway of the default IPv4 route.

    :param route_table_path: Kernel routing table in /proc/net/route format.
    :return: Dotted gateway address, or None if there is no default route.
    """
    try:
        with open(route_table_path, 'r') as f:
            lines = f.read().splitlines()
    except OSError as e:
        logger.debug("Could not read routing table %s: %s", route_table_path, e)
        return None

    best = None
    best_metric = None
    # First line is the column header
    for line in lines[1:]:
        fields = line.split()
        if len(fields) < 8:
            continue
        destination, gateway, flags, metric, mask = fields[1], fields[2], fields[3], fields[6], fields[7]
        try:
            flag_bits = int(flags, 16)
            if int(destination, 16) != 0 or int(mask, 16) != 0:
                continue
            if not flag_bits & RTF_UP or not flag_bits & RTF_GATEWAY:
                continue
            address = socket.inet_ntoa(struct.pack("<L", int(gateway, 16)))
            metric_value = int(metric)
        except (ValueError, struct.error):
            continue
        if best_metric is None or metric_value < best_metric:
            best, best_metric = address, metric_value
    return best

def tun_device() -> List[DeviceMapping]:
    """
    Device mapping for creating TUN/TAP interfaces inside the container.
    """
    return [DeviceMapping(host_path=TUN_DEVICE, container_path=TUN_DEVICE)]
