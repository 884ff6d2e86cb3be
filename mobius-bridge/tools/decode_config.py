#!/usr/bin/env python3
"""Decode every schedule point of saved config.json snapshots.

Drop cloud snapshots into `mobius-bridge/captures/*.json`; writes
`decoded_points.jsonl` and `decoded_summary.txt` next to them.
"""
import sys, os, glob, json

from mobius_bridge.const import DEVICE_TYPE_RADION, DEVICE_TYPE_VORTECH, MODEL_IDS_BY_TYPE
from mobius_bridge.decoder import decode_light_point, decode_pump_point
from mobius_bridge.models import ConfigurationDocument
from mobius_bridge.registry import DeviceRegistry

CAP_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'captures'))

def decode_file(path: str):
    with open(path, 'r', encoding='utf-8') as f:
        doc = ConfigurationDocument.from_dict(json.load(f))
    found = []
    for dtype in (DEVICE_TYPE_RADION, DEVICE_TYPE_VORTECH):
        for dev, tank in DeviceRegistry.find_devices(doc, MODEL_IDS_BY_TYPE[dtype]):
            for idx, pt in enumerate(dev.schedule.points):
                item = {
                    'file': os.path.basename(path),
                    'tank': tank.name,
                    'type': dtype,
                    'device': dev.serial_number or dev.name,
                    'index': idx,
                    'time': pt.time,
                    'data': pt.data,
                }
                if dtype == DEVICE_TYPE_RADION:
                    item['channels'] = {str(ch): r.percent for ch, r in decode_light_point(pt.data).items()}
                else:
                    item['speed'] = decode_pump_point(pt.data)
                found.append(item)
    return found

def main(cap_dir: str = CAP_DIR):
    files = sorted(glob.glob(os.path.join(cap_dir, '*.json')))
    if not files:
        print('No config snapshots found under', cap_dir, file=sys.stderr)
        return 1
    out_jsonl = os.path.join(cap_dir, 'decoded_points.jsonl')
    out_sum = os.path.join(cap_dir, 'decoded_summary.txt')
    total = []
    for p in files:
        total += decode_file(p)
    with open(out_jsonl, 'w', encoding='utf-8') as jf:
        for it in total:
            jf.write(json.dumps(it, ensure_ascii=False) + '\n')
    by_type = {}
    for it in total:
        by_type[it['type']] = by_type.get(it['type'], 0) + 1
    with open(out_sum, 'w', encoding='utf-8') as sf:
        sf.write('Points decoded: %d\n' % len(total))
        for k, v in sorted(by_type.items()):
            sf.write(f"{k}: {v}\n")
    print('Wrote', out_jsonl, 'and', out_sum)
    return 0

if __name__ == '__main__':
    sys.exit(main())
