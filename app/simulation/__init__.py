from .connectivity import ConnectivityResult, analyze_connectivity
from .netlist_generator import NetlistGenerator, generate_netlist
from .netlist_parser import ParsedNetlist, parse_netlist

__all__ = ['ConnectivityResult', 'analyze_connectivity', 'NetlistGenerator', 'generate_netlist',
           'ParsedNetlist', 'parse_netlist']
