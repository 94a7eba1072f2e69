'''
A small helper module to assist with debugging the ddcci_brightness library
'''
import logging
import platform
import traceback


def info() -> dict:
    '''
    Gather and return information that may (or may not) be useful for debugging
    issues with the library.

    Every detected display is probed for its brightness. Nothing is written
    to any display.
    '''
    import ddcci_brightness as ddc

    logger = logging.getLogger(__name__).getChild('info')

    debug_info = {
        'version': ddc.__version__,
        'platform': platform.system(),
        'file': ddc.__file__
    }

    logger.debug('gathering list of all monitors')

    try:
        displays = ddc.list_monitors_info()
    except Exception:
        debug_info['displays'] = traceback.format_exc()
        return debug_info

    debug_info['displays'] = []
    for display in displays:
        entry = {
            'name': display.model_name,
            'serial': display.serial,
            'manufacturer_id': display.manufacturer_id,
            'source': display.source,
            'edid': display.edid
        }
        logger.debug(f'probing {display.model_name!r} ({display.source})')
        try:
            entry['brightness'] = display.probe()
        except Exception:
            entry['brightness'] = traceback.format_exc()
        debug_info['displays'].append(entry)

    return debug_info
